"""
Integration tests for the SQLite model store.

Tests cover:
- Table preparation
- Save / find / delete
- Filtered queries and filtered deletes
- Foreign-key enforcement
"""

import sqlite3

import pytest

from superrest.errors import ColumnTypeError
from superrest.store import Comparison, ModelStore
from tests.models import DUE, Task, Team, make_task


class TestModelStore:
    """Tests for ModelStore."""

    def test_save_assigns_id(self, store):
        task = make_task()
        store.save(task)
        assert task.id is not None

        fetched = store.find(Task, task.id)
        assert fetched is not None
        assert fetched.id == task.id
        assert fetched.title == "Write docs"
        assert fetched.due == DUE
        assert fetched.estimate == 1.5

    def test_save_updates_existing(self, store):
        task = make_task()
        store.save(task)
        task.status = "done"
        store.save(task)

        assert store.query(Task).count() == 1
        assert store.find(Task, task.id).status == "done"

    def test_save_with_explicit_id(self, store):
        """An entity carrying an unknown id is inserted under that id."""
        store.save(make_task(id=7))
        assert store.find(Task, 7).title == "Write docs"

    def test_find_missing(self, store):
        assert store.find(Task, 404) is None

    def test_delete(self, store):
        task = make_task()
        store.save(task)

        assert store.delete(task) is True
        assert store.find(Task, task.id) is None
        assert store.delete(task) is False

    def test_delete_unsaved(self, store):
        assert store.delete(make_task()) is False

    def test_all_in_id_order(self, store):
        for title in ("a", "b", "c"):
            store.save(make_task(title=title))
        assert [t.title for t in store.all(Task)] == ["a", "b", "c"]

    def test_foreign_key_round_trip(self, store):
        team = Team(name="Core")
        store.save(team)
        task = make_task(team_id=team.id)
        store.save(task)
        assert store.find(Task, task.id).team_id == team.id

    def test_foreign_key_enforced(self, store):
        with pytest.raises(sqlite3.IntegrityError):
            store.save(make_task(team_id=999))

    def test_mistyped_entity_not_written(self, store):
        """A bad value fails the save instead of corrupting the table."""
        with pytest.raises(ColumnTypeError):
            store.save(make_task(priority="x"))
        assert store.all(Task) == []

        task = make_task()
        store.save(task)
        task.estimate = float("inf")
        with pytest.raises(ColumnTypeError):
            store.save(task)
        assert store.find(Task, task.id).estimate == 1.5

    def test_revert_drops_table(self, store):
        store.revert(Task)
        with pytest.raises(sqlite3.OperationalError):
            store.all(Task)


class TestQuery:
    """Tests for Query filters."""

    @pytest.fixture
    def seeded(self, store):
        store.save(make_task(title="alpha", status="active", priority=1))
        store.save(make_task(title="beta", status="active", priority=3))
        store.save(make_task(title="gamma", status="archived", priority=5))
        return store

    def test_equals(self, seeded):
        titles = [t.title for t in seeded.query(Task).filter("status", Comparison.EQUALS, "active").all()]
        assert titles == ["alpha", "beta"]

    def test_comparisons(self, seeded):
        def titles(comparison, value):
            return [t.title for t in seeded.query(Task).filter("priority", comparison, value).all()]

        assert titles(Comparison.GREATER_THAN, 1) == ["beta", "gamma"]
        assert titles(Comparison.LESS_THAN_OR_EQUALS, 3) == ["alpha", "beta"]
        assert titles(Comparison.NOT_EQUALS, 3) == ["alpha", "gamma"]

    def test_like_comparisons(self, seeded):
        def titles(comparison, value):
            return [t.title for t in seeded.query(Task).filter("title", comparison, value).all()]

        assert titles(Comparison.HAS_PREFIX, "al") == ["alpha"]
        assert titles(Comparison.HAS_SUFFIX, "ta") == ["beta"]
        assert titles(Comparison.CONTAINS, "mm") == ["gamma"]
        assert titles(Comparison.CONTAINS, "%") == []

    def test_null_comparison(self, seeded):
        assert seeded.query(Task).filter("team_id", Comparison.EQUALS, None).count() == 3

    def test_filters_combine(self, seeded):
        query = (
            seeded.query(Task)
            .filter("status", Comparison.EQUALS, "active")
            .filter("priority", Comparison.GREATER_THAN, 1)
        )
        assert [t.title for t in query.all()] == ["beta"]
        assert query.first().title == "beta"

    def test_unknown_field_rejected(self, seeded):
        with pytest.raises(ValueError, match="has no property 'colour'"):
            seeded.query(Task).filter("colour", Comparison.EQUALS, "red")

    def test_filtered_delete(self, seeded):
        removed = seeded.query(Task).filter("status", Comparison.EQUALS, "active").delete()
        assert removed == 2
        assert [t.title for t in seeded.all(Task)] == ["gamma"]


class TestMemoryStore:
    """Tests for the shared in-memory connection."""

    def test_memory_database_persists_across_operations(self):
        store = ModelStore(":memory:")
        try:
            store.prepare(Team)
            store.save(Team(name="Core"))
            assert [t.name for t in store.all(Team)] == ["Core"]
        finally:
            store.close()
