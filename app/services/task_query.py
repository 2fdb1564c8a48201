"""
Task query construction.

Turns list-request parameters into SQLAlchemy filter and ordering clauses.
Every clause list starts with the owner predicate, so no caller can build a
task query that reaches another user's rows.

Ordering is the single requested key, then creation time in the same
direction, then id ascending. The last two keys only break ties and make
paging stable between requests.
"""

import math
import uuid

from sqlalchemy import ColumnElement, or_

from app.models import Task, TaskTag
from app.schemas import Pagination, TaskListParams

SORT_COLUMNS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    "completedAt": Task.completed_at,
    "title": Task.title,
    "status": Task.status,
    "priority": Task.priority,
    "category": Task.category,
}


def owner_scope(owner_id: uuid.UUID) -> ColumnElement[bool]:
    return Task.owner_id == owner_id


def build_task_filters(
    owner_id: uuid.UUID, params: TaskListParams
) -> list[ColumnElement[bool]]:
    """AND-ed filter clauses for a list request; `search` is an OR of three matches."""
    clauses = [owner_scope(owner_id)]

    # includeArchived widens the match, it never restricts to archived only
    if not params.include_archived:
        clauses.append(Task.is_archived.is_(False))

    if params.status:
        clauses.append(Task.status == params.status)
    if params.priority:
        clauses.append(Task.priority == params.priority)
    if params.category:
        clauses.append(Task.category.icontains(params.category, autoescape=True))
    if params.search:
        term = params.search
        clauses.append(
            or_(
                Task.title.icontains(term, autoescape=True),
                Task.description.icontains(term, autoescape=True),
                Task.tag_links.any(TaskTag.name.icontains(term, autoescape=True)),
            )
        )
    return clauses


def build_task_ordering(params: TaskListParams) -> list[ColumnElement]:
    column = SORT_COLUMNS[params.sort_by]
    descending = params.sort_order == "desc"

    ordering = [column.desc() if descending else column.asc()]
    if column is not Task.created_at:
        ordering.append(Task.created_at.desc() if descending else Task.created_at.asc())
    ordering.append(Task.id.asc())
    return ordering


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def build_pagination(params: TaskListParams, returned: int, total: int) -> Pagination:
    return Pagination(
        current=params.page,
        total=page_count(total, params.limit),
        count=returned,
        total_records=total,
    )
