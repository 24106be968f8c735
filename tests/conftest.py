"""
Shared fixtures for SuperREST tests.
"""

import tempfile
from pathlib import Path

import pytest

from superrest.store import ModelStore
from tests.models import Task, Team


@pytest.fixture
def data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def store(data_dir):
    """Store with the teams and tasks tables prepared."""
    store = ModelStore(str(Path(data_dir) / "test.db"), wal_mode=False)
    store.prepare(Team)
    store.prepare(Task)
    yield store
    store.close()
