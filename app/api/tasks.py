"""
Task API Routes - owner-scoped CRUD, archive toggle, bulk update and stats.

Every route resolves the caller through `get_current_user`; every query and
write is restricted to the caller's own tasks.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_app_db
from app.db_handlers import TaskDBHandler
from app.dependencies.auth import get_current_user
from app.dependencies.tasks import get_owned_task, get_task_list_params
from app.exceptions import BadRequest, ValidationError, errors_from_pydantic
from app.models import Task, User
from app.models.base import utcnow
from app.schemas import (
    ApiResponse,
    BulkUpdateRequest,
    BulkUpdateResult,
    DeleteResult,
    TaskCreate,
    TaskListParams,
    TaskListResponse,
    TaskOut,
    TaskStats,
    TaskUpdate,
    error_responses,
)
from app.services.task_query import build_pagination
from app.services.task_stats import day_bounds, resolve_timezone
from app.utils.logger import setup_logger

logger = setup_logger("api.tasks")

router = APIRouter(
    prefix="/api/tasks",
    tags=["Tasks"],
    responses=error_responses(400, 401, 403, 404, 422),
)


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    params: TaskListParams = Depends(get_task_list_params),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_app_db),
    task_db_handler: TaskDBHandler = Depends(),
):
    """
    List the caller's tasks with filtering, sorting and pagination.

    Archived tasks are included only when `includeArchived=true`.
    """
    tasks, total = await task_db_handler.list_tasks(current_user.id, params, db=db)
    return TaskListResponse(
        data=[TaskOut.model_validate(task) for task in tasks],
        pagination=build_pagination(params, len(tasks), total),
    )


@router.get("/stats/overview", response_model=ApiResponse[TaskStats])
async def get_task_stats(
    tz: str | None = Query(None, description="IANA timezone defining 'today'"),
    include_archived: bool = Query(False, alias="includeArchived"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_app_db),
    task_db_handler: TaskDBHandler = Depends(),
):
    """Counts by status and priority, plus overdue and due-today counts."""
    now = utcnow()
    day_start, day_end = day_bounds(now, resolve_timezone(tz))
    stats = await task_db_handler.get_task_stats(
        current_user.id,
        now=now,
        day_start=day_start,
        day_end=day_end,
        include_archived=include_archived,
        db=db,
    )
    return ApiResponse(data=TaskStats(**stats))


@router.patch("/bulk", response_model=ApiResponse[BulkUpdateResult])
async def bulk_update_tasks(
    request: BulkUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_app_db),
    task_db_handler: TaskDBHandler = Depends(),
):
    """
    Apply one partial update to several tasks.

    Only tasks owned by the caller are touched; the response reports how many
    matched and how many actually changed.
    """
    if not request.task_ids:
        raise BadRequest("Task IDs are required")
    if not request.updates:
        raise BadRequest("Updates are required")

    task_ids = []
    for raw_id in request.task_ids:
        try:
            task_ids.append(uuid.UUID(str(raw_id)))
        except ValueError as e:
            raise BadRequest(f"Invalid task ID: {raw_id}") from e

    try:
        changes = TaskUpdate.model_validate(request.updates).changes()
    except PydanticValidationError as e:
        raise ValidationError(errors_from_pydantic(e.errors())) from e

    result = await task_db_handler.bulk_update(
        current_user.id, task_ids, changes, db=db
    )
    return ApiResponse(
        message=f"{result.modified} tasks updated successfully", data=result
    )


@router.get("/{task_id}", response_model=ApiResponse[TaskOut])
async def get_task(task: Task = Depends(get_owned_task)):
    return ApiResponse(data=TaskOut.model_validate(task))


@router.post(
    "", response_model=ApiResponse[TaskOut], status_code=status.HTTP_201_CREATED
)
async def create_task(
    task_data: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_app_db),
    task_db_handler: TaskDBHandler = Depends(),
):
    task = await task_db_handler.create_task(
        current_user.id, task_data.model_dump(), db=db
    )
    return ApiResponse(
        message="Task created successfully", data=TaskOut.model_validate(task)
    )


@router.put("/{task_id}", response_model=ApiResponse[TaskOut])
async def update_task(
    task_data: TaskUpdate,
    task: Task = Depends(get_owned_task),
    db: AsyncSession = Depends(get_app_db),
    task_db_handler: TaskDBHandler = Depends(),
):
    """Partial update; owner fields in the body are ignored."""
    task = await task_db_handler.update_task(task, task_data.changes(), db=db)
    return ApiResponse(
        message="Task updated successfully", data=TaskOut.model_validate(task)
    )


@router.delete("/{task_id}", response_model=ApiResponse[DeleteResult])
async def delete_task(
    task: Task = Depends(get_owned_task),
    db: AsyncSession = Depends(get_app_db),
    task_db_handler: TaskDBHandler = Depends(),
):
    await task_db_handler.delete_task(task, db=db)
    return ApiResponse(message="Task deleted successfully", data=DeleteResult())


@router.patch("/{task_id}/archive", response_model=ApiResponse[TaskOut])
async def toggle_task_archive(
    task: Task = Depends(get_owned_task),
    db: AsyncSession = Depends(get_app_db),
    task_db_handler: TaskDBHandler = Depends(),
):
    """Flip the archived flag; a second call restores the original state."""
    task = await task_db_handler.toggle_archive(task, db=db)
    action = "archived" if task.is_archived else "unarchived"
    return ApiResponse(
        message=f"Task {action} successfully", data=TaskOut.model_validate(task)
    )
