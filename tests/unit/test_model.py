"""
Unit tests for SuperModel.

Tests cover:
- Construction and defaults
- Row conversion (strict)
- JSON conversion (strict out, lenient in)
- String rendering
- Storage schema declaration
"""

from datetime import datetime

import pytest

from superrest.errors import ColumnTypeError, MissingColumnError
from superrest.model import encode_collection
from superrest.schema import PropertyKind
from superrest.store import Column, Row, SchemaBuilder
from tests.models import DUE, Note, Task, Team, make_task

FIELDS = ("title", "status", "priority", "estimate", "due", "team_id")


def assert_same_fields(left, right):
    for name in FIELDS:
        assert getattr(left, name) == getattr(right, name), name


class TestConstruction:
    """Tests for SuperModel construction."""

    def test_defaults(self):
        """Unset properties take their kind's default."""
        task = Task()
        assert task.id is None
        assert task.title == ""
        assert task.priority == 0
        assert task.estimate == 0.0
        assert isinstance(task.due, datetime)
        assert task.team_id is None

    def test_keyword_values(self):
        task = make_task(priority=4, team_id=3)
        assert task.priority == 4
        assert task.team_id == 3

    def test_unknown_keyword_rejected(self):
        with pytest.raises(TypeError, match="unknown properties"):
            Task(colour="red")

    def test_descriptors_follow_declaration_order(self):
        task = make_task()
        assert [d.name for d in task.props] == list(FIELDS)
        assert task.props[5].kind == PropertyKind.FOREIGN_KEY

    def test_descriptors_are_per_instance(self):
        """Setting through one instance's descriptor leaves others alone."""
        first, second = make_task(), make_task()
        first.props[0].set("Changed")
        assert first.title == "Changed"
        assert second.title == "Write docs"

    def test_custom_binding(self):
        """make_props() may bind properties to other attributes."""
        note = Note(text="hello")
        assert note._text == "hello"
        assert note.to_json() == {"id": None, "text": "hello"}
        assert Note()._text == ""

    def test_default_table_name(self):
        class Widget(Team):
            table_name = ""

        assert Widget.get_table_name() == "widgets"


class TestRowConversion:
    """Tests for the strict row path."""

    def test_make_row_writes_every_field(self):
        row = make_task().make_row()
        assert set(row) == set(FIELDS)
        assert row.raw("due") == "2024-03-01T09:30:00+00:00"
        assert row.raw("team_id") is None

    def test_row_round_trip(self):
        """make_row() then from_row() reproduces the entity."""
        task = make_task(team_id=9)
        restored = Task.from_row(task.make_row())
        assert_same_fields(task, restored)

    def test_from_row_reads_id(self):
        row = make_task().make_row()
        row.set("id", 12)
        assert Task.from_row(row).id == 12

    def test_missing_column_fails(self):
        values = make_task().make_row().to_dict()
        del values["status"]
        with pytest.raises(MissingColumnError) as exc_info:
            Task.from_row(Row(values))
        assert exc_info.value.column == "status"

    def test_mistyped_column_fails(self):
        values = make_task().make_row().to_dict()
        values["priority"] = "high"
        with pytest.raises(ColumnTypeError, match="priority"):
            Task.from_row(Row(values))

    def test_non_finite_column_fails(self):
        values = make_task().make_row().to_dict()
        values["estimate"] = float("inf")
        with pytest.raises(ColumnTypeError, match="estimate"):
            Task.from_row(Row(values))

    def test_make_row_rejects_mistyped_attribute(self):
        """Values assigned outside the JSON path are checked on write."""
        task = make_task()
        task.priority = "3"
        with pytest.raises(ColumnTypeError) as exc_info:
            task.make_row()
        assert exc_info.value.column == "priority"

        with pytest.raises(ColumnTypeError):
            Task(estimate=float("nan")).make_row()

    def test_make_row_normalises_values(self):
        row = make_task(estimate=4, due="2024-03-01T09:30:00+00:00").make_row()
        assert row.raw("estimate") == 4.0
        assert isinstance(row.raw("estimate"), float)
        assert row.raw("due") == "2024-03-01T09:30:00+00:00"

    def test_set_row_is_not_lenient(self):
        """A bad column aborts the populate call."""
        task = make_task()
        with pytest.raises(MissingColumnError):
            task.set_row(Row({"title": "Only title"}))


class TestJsonConversion:
    """Tests for the wire path."""

    def test_to_json_is_total(self):
        document = make_task().to_json()
        assert document == {
            "id": None,
            "title": "Write docs",
            "status": "active",
            "priority": 2,
            "estimate": 1.5,
            "due": "2024-03-01T09:30:00+00:00",
            "team_id": None,
        }

    def test_json_round_trip(self):
        """to_json() then from_json() reproduces every declared field."""
        task = make_task(team_id=4, estimate=0.25)
        assert_same_fields(task, Task.from_json(task.to_json()))

    def test_missing_fields_left_unchanged(self):
        task = make_task()
        task.set_json({"status": "done"})
        assert task.status == "done"
        assert task.title == "Write docs"
        assert task.priority == 2
        assert task.due == DUE

    def test_mistyped_field_skipped(self):
        """A wrong-kind value is skipped; the other fields still apply."""
        task = make_task()
        task.set_json({"priority": "high", "status": "done", "estimate": 4, "due": "soon"})
        assert task.priority == 2
        assert task.due == DUE
        assert task.status == "done"
        assert task.estimate == 4.0

    def test_out_of_range_numbers_skipped(self):
        task = make_task()
        task.set_json({"estimate": float("inf"), "priority": 2**70, "team_id": 2**64})
        assert task.estimate == 1.5
        assert task.priority == 2
        assert task.team_id is None

    def test_id_not_taken_from_json(self):
        task = make_task()
        task.set_json({"id": 99})
        assert task.id is None

    def test_foreign_key_cleared_by_null(self):
        task = make_task(team_id=3)
        task.set_json({"team_id": None})
        assert task.team_id is None

    def test_encode_collection(self):
        documents = encode_collection([make_task(title="a"), make_task(title="b")])
        assert [d["title"] for d in documents] == ["a", "b"]


class TestDescription:
    """Tests for string rendering."""

    def test_renders_in_declaration_order(self):
        assert str(make_task()) == (
            "title: Write docs status: active priority: 2 estimate: 1.5 "
            "due: 2024-03-01 09:30:00+00:00 team_id: None "
        )

    def test_foreign_key_rendering(self):
        assert str(make_task(team_id=4)).endswith("team_id: Some(4) ")

    def test_repr(self):
        assert repr(Team(name="Core")) == "<Team id=None name: Core>"


class TestSchema:
    """Tests for storage schema declaration."""

    def test_columns_in_order(self):
        builder = Task.schema_builder()
        assert [c.name for c in builder.columns] == ["id", *FIELDS]
        assert builder.columns[0] == Column("id", "INTEGER", primary_key=True)
        assert builder.columns[-1] == Column("team_id", "INTEGER", optional=True)
        assert [k.foreign_table for k in builder.foreign_keys] == ["teams"]

    def test_create_sql(self):
        assert Task.schema_builder().create_sql() == (
            'CREATE TABLE IF NOT EXISTS "tasks" ('
            '"id" INTEGER PRIMARY KEY AUTOINCREMENT, '
            '"title" VARCHAR(255) NOT NULL, '
            '"status" VARCHAR(255) NOT NULL, '
            '"priority" INTEGER NOT NULL, '
            '"estimate" REAL NOT NULL, '
            '"due" TIMESTAMP NOT NULL, '
            '"team_id" INTEGER NULL, '
            'CONSTRAINT "fk_team_id_teams" FOREIGN KEY ("team_id") REFERENCES "teams" ("id"))'
        )

    def test_prepare_schema_with_explicit_definitions(self):
        builder = SchemaBuilder("teams")
        Team.prepare_schema(builder, Team.prop_defs)
        assert builder.drop_sql() == 'DROP TABLE IF EXISTS "teams"'
        assert [c.sql_type for c in builder.columns] == ["INTEGER", "VARCHAR(255)"]

    def test_duplicate_column_rejected(self):
        builder = SchemaBuilder("things")
        builder.int("count")
        with pytest.raises(ValueError, match="Duplicate column"):
            builder.double("count")
