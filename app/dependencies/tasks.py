import uuid

from fastapi import Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db import get_app_db
from app.db_handlers.task import TaskDBHandler
from app.dependencies.auth import get_current_user
from app.exceptions import NotFound
from app.models import Task, User
from app.schemas import (
    MAX_PAGE_NUMBER,
    SortField,
    SortOrder,
    TaskListParams,
    TaskPriority,
    TaskStatus,
)


async def get_owned_task(
    task_id: str = Path(..., description="The ID of the task"),
    db: AsyncSession = Depends(get_app_db),
    current_user: User = Depends(get_current_user),
) -> Task:
    """
    Dependency to load a task that belongs to the current user.

    A malformed id, an unknown id and another user's task all raise the same
    NotFound, so callers cannot probe for records they do not own.
    """
    try:
        task_uuid = uuid.UUID(task_id)
    except ValueError as e:
        raise NotFound("Task not found") from e

    task = await TaskDBHandler().get_owned_task(task_uuid, current_user.id, db=db)
    if task is None:
        raise NotFound("Task not found")
    return task


def get_task_list_params(
    status: TaskStatus | None = Query(None, description="Exact status match"),
    priority: TaskPriority | None = Query(None, description="Exact priority match"),
    category: str | None = Query(
        None, description="Case-insensitive substring of the category"
    ),
    search: str | None = Query(
        None, description="Case-insensitive substring of title, description or a tag"
    ),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    page: int = Query(
        1, ge=1, le=MAX_PAGE_NUMBER, description="1-based page number"
    ),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Page size",
    ),
    include_archived: bool = Query(False, alias="includeArchived"),
) -> TaskListParams:
    return TaskListParams(
        status=status,
        priority=priority,
        category=category or None,
        search=search or None,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
        include_archived=include_archived,
    )
