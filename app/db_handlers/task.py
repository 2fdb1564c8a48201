from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models import CLOSED_STATUSES, TASK_PRIORITIES, TASK_STATUSES, Task
from app.models.base import utcnow
from app.schemas import BulkUpdateResult, TaskListParams
from app.services.task_mutations import apply_task_changes, sync_completed_at
from app.services.task_query import (
    build_task_filters,
    build_task_ordering,
    owner_scope,
    page_offset,
)
from app.utils.logger import setup_logger

logger = setup_logger("task_db_handler")


class TaskDBHandler(BaseDBHandler[Task]):
    def __init__(self):
        super().__init__(Task)

    @check_local_db
    async def list_tasks(
        self, owner_id: uuid.UUID, params: TaskListParams, *, db: AsyncSession = None
    ) -> tuple[list[Task], int]:
        """One page of the caller's tasks plus the total match count."""
        filters = build_task_filters(owner_id, params)
        stmt = (
            select(Task)
            .where(*filters)
            .order_by(*build_task_ordering(params))
            .offset(page_offset(params.page, params.limit))
            .limit(params.limit)
        )
        try:
            result = await db.execute(stmt)
            tasks = list(result.scalars().all())
            total = await self.count_where(*filters, db=db)
        except SQLAlchemyError as e:
            logger.error(f"Error listing tasks for user {owner_id}: {e}", exc_info=True)
            raise
        logger.debug(
            f"Listed {len(tasks)}/{total} tasks for user {owner_id} (page {params.page})"
        )
        return tasks, total

    @check_local_db
    async def get_owned_task(
        self, task_id: uuid.UUID, owner_id: uuid.UUID, *, db: AsyncSession = None
    ) -> Task | None:
        """Get a task by id only if it belongs to the given user."""
        try:
            stmt = select(Task).where(Task.id == task_id, owner_scope(owner_id))
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving owned task {task_id} for user {owner_id}: {e}")
            raise

    @check_local_db
    async def create_task(
        self, owner_id: uuid.UUID, data: dict[str, Any], *, db: AsyncSession = None
    ) -> Task:
        """Create a task; the owner always comes from the authenticated caller."""
        fields = {k: v for k, v in data.items() if k != "tags"}
        fields["owner_id"] = owner_id
        task = Task(**fields)
        task.set_tags(data.get("tags") or [])
        sync_completed_at(task)
        task = await self.save(task, db=db)
        logger.info(f"Created task {task.id} for user {owner_id}")
        return task

    @check_local_db
    async def update_task(
        self, task: Task, changes: dict[str, Any], *, db: AsyncSession = None
    ) -> Task:
        if apply_task_changes(task, changes):
            task = await self.save(task, db=db)
            logger.info(f"Updated task {task.id} fields {sorted(changes)}")
        return task

    @check_local_db
    async def toggle_archive(self, task: Task, *, db: AsyncSession = None) -> Task:
        """Flip the archived flag (calling twice restores the original value)."""
        task.is_archived = not task.is_archived
        task = await self.save(task, db=db)
        logger.info(f"Task {task.id} archived={task.is_archived}")
        return task

    @check_local_db
    async def delete_task(self, task: Task, *, db: AsyncSession = None) -> None:
        await self.remove(task, db=db)
        logger.info(f"Deleted task {task.id}")

    @check_local_db
    async def bulk_update(
        self,
        owner_id: uuid.UUID,
        task_ids: list[uuid.UUID],
        changes: dict[str, Any],
        *,
        db: AsyncSession = None,
    ) -> BulkUpdateResult:
        """
        Apply the same changes to every listed task the caller owns.

        Ids that are unknown or owned by someone else are skipped silently.
        `matched` counts owned tasks found, `modified` those whose stored
        values actually changed. Each row is written independently of the
        others; no cross-row transaction is implied.
        """
        stmt = select(Task).where(Task.id.in_(task_ids), owner_scope(owner_id))
        result = await db.execute(stmt)
        tasks = list(result.scalars().all())

        now = utcnow()
        modified = 0
        for task in tasks:
            if apply_task_changes(task, changes, now):
                db.add(task)
                modified += 1

        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Bulk update failed for user {owner_id}: {e}", exc_info=True)
            raise

        logger.info(
            f"Bulk update for user {owner_id}: {len(task_ids)} requested, "
            f"{len(tasks)} matched, {modified} modified"
        )
        return BulkUpdateResult(matched=len(tasks), modified=modified)

    @check_local_db
    async def get_task_stats(
        self,
        owner_id: uuid.UUID,
        *,
        now: datetime,
        day_start: datetime,
        day_end: datetime,
        include_archived: bool = False,
        db: AsyncSession = None,
    ) -> dict[str, Any]:
        """Per-user counts by status/priority plus overdue and due-today counts."""
        scope = [owner_scope(owner_id)]
        counted = list(scope)
        if not include_archived:
            counted.append(Task.is_archived.is_(False))

        try:
            by_status = dict.fromkeys(TASK_STATUSES, 0)
            rows = await db.execute(
                select(Task.status, func.count()).where(*counted).group_by(Task.status)
            )
            by_status.update({status: count for status, count in rows.all()})

            by_priority = dict.fromkeys(TASK_PRIORITIES, 0)
            rows = await db.execute(
                select(Task.priority, func.count())
                .where(*counted)
                .group_by(Task.priority)
            )
            by_priority.update({priority: count for priority, count in rows.all()})

            open_and_active = [
                *scope,
                Task.is_archived.is_(False),
                Task.status.not_in(CLOSED_STATUSES),
            ]
            overdue = await self.count_where(
                *open_and_active, Task.due_date < now, db=db
            )
            due_today = await self.count_where(
                *open_and_active,
                Task.due_date >= day_start,
                Task.due_date < day_end,
                db=db,
            )
            archived = await self.count_where(
                *scope, Task.is_archived.is_(True), db=db
            )
        except SQLAlchemyError as e:
            logger.error(f"Error computing stats for user {owner_id}: {e}", exc_info=True)
            raise

        return {
            "total": sum(by_status.values()),
            "archived": archived,
            "by_status": by_status,
            "by_priority": by_priority,
            "overdue": overdue,
            "due_today": due_today,
        }
