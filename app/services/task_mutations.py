"""
Field-level rules shared by single and bulk task updates.
"""

from datetime import datetime
from typing import Any

from app.models import Task
from app.models.base import as_utc, utcnow
from app.schemas import TASK_UPDATABLE_FIELDS


def _current_value(task: Task, field: str) -> Any:
    value = getattr(task, field)
    if field == "tags":
        return list(value)
    if field == "due_date":
        return as_utc(value)
    return value


def sync_completed_at(task: Task, now: datetime | None = None) -> None:
    """Stamp completed_at when a task is completed and clear it otherwise."""
    if task.status == "completed":
        if task.completed_at is None:
            task.completed_at = now or utcnow()
    elif task.completed_at is not None:
        task.completed_at = None


def apply_task_changes(
    task: Task, changes: dict[str, Any], now: datetime | None = None
) -> bool:
    """
    Apply allow-listed field changes to a task in place.

    Keys outside TASK_UPDATABLE_FIELDS (owner, ids, timestamps) are ignored.
    Returns True when at least one stored value actually changed.
    """
    modified = False
    for field, value in changes.items():
        if field not in TASK_UPDATABLE_FIELDS:
            continue
        if _current_value(task, field) == value:
            continue
        if field == "tags":
            task.set_tags(value)
        else:
            setattr(task, field, value)
        modified = True

    if "status" in changes:
        before = task.completed_at
        sync_completed_at(task, now)
        modified = modified or before != task.completed_at
    return modified
