"""
Business logic services for the Taskboard API.

Query construction, mutation rules and statistics helpers used by the task
database handler and routes.
"""

from app.services.task_mutations import apply_task_changes, sync_completed_at
from app.services.task_query import (
    build_pagination,
    build_task_filters,
    build_task_ordering,
    owner_scope,
    page_count,
    page_offset,
)
from app.services.task_stats import day_bounds, resolve_timezone

__all__ = [
    "apply_task_changes",
    "sync_completed_at",
    "build_pagination",
    "build_task_filters",
    "build_task_ordering",
    "owner_scope",
    "page_count",
    "page_offset",
    "day_bounds",
    "resolve_timezone",
]
