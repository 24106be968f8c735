"""
Model module for SuperREST: property descriptors, update keys and SuperModel.
"""

from .base import SuperModel, encode_collection
from .descriptors import PropertyDescriptor, bind_attribute
from .update_keys import UpdateKey, apply_update_keys, generate_update_keys

__all__ = [
    "SuperModel",
    "encode_collection",
    "PropertyDescriptor",
    "bind_attribute",
    "UpdateKey",
    "generate_update_keys",
    "apply_update_keys",
]
