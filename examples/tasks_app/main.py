"""
Sample task-tracking API built on SuperREST.

Features:
- Team and Task resources with a foreign key from Task to Team
- Per-task authorization on the X-Actor header
- ?status=... scoping of bulk list and bulk delete
- Validation of task titles and priorities

Usage:
    python -m examples.tasks_app.main

Environment:
    SUPERREST_DATABASE_PATH: SQLite file (default: superrest.db)
    SUPERREST_PORT: Port to listen on (default: 8080)
"""

from __future__ import annotations

from superrest import (
    BulkFilter,
    Comparison,
    ResourceController,
    ResourcePolicy,
    ResourceRequest,
    SuperModel,
    create_app,
    foreign_key_prop,
    prop,
)
from superrest.config import Settings
from superrest.errors import ValidationError
from superrest.main import open_store, serve
from superrest.schema import freeze_registry, get_registry

# =============================================================================
# Models
# =============================================================================


class Team(SuperModel):
    table_name = "teams"
    prop_defs = (
        prop("name", "string"),
    )


class Task(SuperModel):
    table_name = "tasks"
    prop_defs = (
        prop("title", "string"),
        prop("status", "string"),
        prop("owner", "string"),
        prop("priority", "int"),
        prop("estimate", "double"),
        prop("due", "date"),
        foreign_key_prop("team_id", "teams"),
    )


# =============================================================================
# Policies
# =============================================================================


class TaskPolicy(ResourcePolicy[Task]):
    """Tasks are visible to their owner; anonymous callers see everything."""

    def authorized(self, request: ResourceRequest, entity: Task) -> bool:
        return request.actor is None or not entity.owner or entity.owner == request.actor

    def bulk_filter(self, request: ResourceRequest) -> BulkFilter | None:
        status = request.query.get("status")
        if status:
            return BulkFilter("status", Comparison.EQUALS, status)
        return None

    def validate(self, request: ResourceRequest, entity: Task) -> None:
        if not entity.title.strip():
            raise ValidationError("Task title cannot be empty", field_name="title")
        if not 0 <= entity.priority <= 5:
            raise ValidationError(
                f"Task priority must be between 0 and 5, got {entity.priority}",
                field_name="priority",
            )
        if not entity.owner and request.actor:
            entity.owner = request.actor


# =============================================================================
# App
# =============================================================================

settings = Settings()
store = open_store(settings)

registry = get_registry()
registry.register(Team)
registry.register(Task)
freeze_registry()

for model in registry.models():
    store.prepare(model)

app = create_app(
    [
        ResourceController(Team, store),
        ResourceController(Task, store, policy=TaskPolicy()),
    ],
    settings=settings,
    registry=registry,
)


if __name__ == "__main__":
    serve(app, settings)
