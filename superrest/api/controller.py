"""
Generic resource controller.

ResourceController maps the REST verbs onto CRUD operations for one
SuperModel subclass:

    GET    /<resource>        index    (bulk filter applied)
    POST   /<resource>        create
    GET    /<resource>/{id}   show
    PATCH  /<resource>/{id}   update   (partial, through update keys)
    PUT    /<resource>/{id}   replace  (full, through a decoded entity)
    DELETE /<resource>/{id}   destroy
    DELETE /<resource>        clear    (bulk filter applied)

Per-resource behavior comes from a ResourcePolicy with three hooks:
authorized, bulk_filter and validate. The default policy permits
everything, filters nothing and validates nothing.

Invariants:
    - Authorization is checked before any entity-scoped read or mutation
    - Validation runs after field mutation and before persistence
    - Decode, authorization and validation failures raise distinct errors
      and never reach the store
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from ..errors import AccessDeniedError, DecodeError, NotFoundError
from ..model.base import SuperModel
from ..store.sqlite_store import Comparison, ModelStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=SuperModel)


def _reject_constant(name: str) -> Any:
    raise DecodeError(f"Request body contains non-standard JSON constant {name}", reason="malformed")


@dataclass
class ResourceRequest:
    """Incoming call as seen by the controller.

    Attributes:
        body: Raw request body, None when absent
        actor: Caller identity (X-Actor header), if any
        query: Query string parameters
        headers: Request headers
    """

    body: bytes | None = None
    actor: str | None = None
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def with_json(cls, document: Any, **kwargs: Any) -> ResourceRequest:
        """Build a request whose body is the JSON encoding of document."""
        return cls(body=json.dumps(document).encode("utf-8"), **kwargs)

    def json(self) -> dict[str, Any]:
        """Decode the body as a JSON object.

        Raises:
            DecodeError: If the body is missing, not JSON, or not an object
        """
        if not self.body:
            raise DecodeError("Request body is required", reason="missing")
        try:
            document = json.loads(self.body, parse_constant=_reject_constant)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise DecodeError("Request body is not valid JSON", reason="malformed") from None
        if not isinstance(document, dict):
            raise DecodeError(
                f"Request body must be a JSON object, got {type(document).__name__}",
                reason="not_object",
            )
        return document


@dataclass(frozen=True)
class BulkFilter:
    """Field/comparison/value triple scoping index and clear."""

    field: str
    comparison: Comparison
    value: Any


class ResourcePolicy(Generic[M]):
    """Hooks customizing a ResourceController.

    Subclass and override any of the three methods.
    """

    def authorized(self, request: ResourceRequest, entity: M) -> bool:
        """Whether request may act on entity. Default: always."""
        return True

    def bulk_filter(self, request: ResourceRequest) -> BulkFilter | None:
        """Filter for bulk list and bulk delete. Default: none."""
        return None

    def validate(self, request: ResourceRequest, entity: M) -> None:
        """Check or repair entity before it is saved.

        Raise ValidationError to abort. Default: no-op.
        """


class ResourceController(Generic[M]):
    """CRUD controller for one model class.

    Attributes:
        model: SuperModel subclass served by this controller
        store: Store the entities are persisted in
        policy: Authorization, bulk filter and validation hooks

    Example:
        >>> controller = ResourceController(Task, store, policy=TaskPolicy())
        >>> controller.index(ResourceRequest())
        [<Task id=1 ...>]
    """

    def __init__(
        self,
        model: type[M],
        store: ModelStore,
        policy: ResourcePolicy[M] | None = None,
    ) -> None:
        self.model = model
        self.store = store
        self.policy: ResourcePolicy[M] = policy or ResourcePolicy()

    # Hooks (delegate to the policy; subclasses may override directly)

    def authorized(self, request: ResourceRequest, entity: M) -> bool:
        return self.policy.authorized(request, entity)

    def bulk_filter(self, request: ResourceRequest) -> BulkFilter | None:
        return self.policy.bulk_filter(request)

    def validate(self, request: ResourceRequest, entity: M) -> None:
        self.policy.validate(request, entity)

    # Operations

    def index(self, request: ResourceRequest) -> list[M]:
        """List entities, scoped by the bulk filter if one applies."""
        query = self.store.query(self.model)
        bulk = self.bulk_filter(request)
        if bulk is not None:
            query = query.filter(bulk.field, bulk.comparison, bulk.value)
        return query.all()

    def create(self, request: ResourceRequest) -> M:
        """Decode, validate and save a new entity."""
        entity = self.entity_from(request)

        self.validate(request, entity)

        self.store.save(entity)
        logger.info(f"Created {self.model.__name__} id={entity.id}")
        return entity

    def show(self, request: ResourceRequest, entity: M) -> M:
        self._require_authorized(request, entity)
        return entity

    def update(self, request: ResourceRequest, entity: M) -> M:
        """Merge the body's fields into entity, validate and save."""
        self._require_authorized(request, entity)

        entity.update_from(request.json())

        self.validate(request, entity)

        self.store.save(entity)
        return entity

    def replace(self, request: ResourceRequest, entity: M) -> M:
        """Overwrite entity with the entity decoded from the body.

        Fields absent from the body take the decoded entity's defaults;
        an absent date field is reset to the current time.
        """
        self._require_authorized(request, entity)

        new_entity = self.entity_from(request)
        entity.set_json(new_entity.to_json())

        self.validate(request, entity)

        self.store.save(entity)
        return entity

    def destroy(self, request: ResourceRequest, entity: M) -> None:
        self._require_authorized(request, entity)
        self.store.delete(entity)
        logger.info(f"Deleted {self.model.__name__} id={entity.id}")

    def clear(self, request: ResourceRequest) -> int:
        """Delete entities, scoped by the bulk filter if one applies.

        Returns:
            Number of entities removed
        """
        query = self.store.query(self.model)
        bulk = self.bulk_filter(request)
        if bulk is not None:
            query = query.filter(bulk.field, bulk.comparison, bulk.value)
        return query.delete()

    # Helpers

    def resolve(self, entity_id: int) -> M:
        """Load the entity addressed by a path identifier.

        Raises:
            NotFoundError: If no such entity exists
        """
        entity = self.store.find(self.model, entity_id)
        if entity is None:
            raise NotFoundError(self.model.__name__, entity_id)
        return entity

    def entity_from(self, request: ResourceRequest) -> M:
        """Decode the request body into a fresh entity.

        Raises:
            DecodeError: If the body is missing or not a JSON object
        """
        return self.model.from_json(request.json())

    def _require_authorized(self, request: ResourceRequest, entity: M) -> None:
        if not self.authorized(request, entity):
            logger.warning(
                f"Denied {request.actor or 'anonymous'} on {self.model.__name__} id={entity.id}"
            )
            raise AccessDeniedError(self.model.__name__, entity.id, actor=request.actor)
