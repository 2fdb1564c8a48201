"""
Task model for user-owned to-do records.

Architecture:
    User → Task → TaskTag

Lifecycle:
    1. Created by an authenticated user; the owner is stamped from the session
    2. Status: pending → in-progress → completed/cancelled (any transition allowed)
    3. completed_at is maintained by the server as tasks enter/leave "completed"
    4. Archiving hides a task from default listings and statistics

Key Features:
    - Enumerated status and priority, rejected before persistence when invalid
    - Immutable owner reference
    - Free-text tags stored in their own table so they can be searched
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    false,
)
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import relationship, validates

from app.models.base import Base, TimestampMixin, UUIDMixin

TASK_STATUSES = ("pending", "in-progress", "completed", "cancelled")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")
# Statuses that no longer count towards overdue/due-today
CLOSED_STATUSES = ("completed", "cancelled")


class Task(Base, UUIDMixin, TimestampMixin):
    """
    A to-do item owned by exactly one user.

    `owner_id` is written once at creation. Update paths never copy it from
    client input.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_owner_id", "owner_id"),
        Index("ix_tasks_owner_status", "owner_id", "status"),
        Index("ix_tasks_owner_archived", "owner_id", "is_archived"),
        Index("ix_tasks_due_date", "due_date"),
    )

    title = Column(String(200), nullable=False, comment="Short task title")

    description = Column(Text, nullable=True, comment="Free-form description")

    status = Column(
        String(20),
        nullable=False,
        default="pending",
        server_default="pending",
        comment="pending/in-progress/completed/cancelled",
    )

    priority = Column(
        String(20),
        nullable=False,
        default="medium",
        server_default="medium",
        comment="low/medium/high/urgent",
    )

    category = Column(String(50), nullable=True, comment="Optional grouping label")

    due_date = Column(
        DateTime(timezone=True), nullable=True, comment="When the task is due (UTC)"
    )

    completed_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the task last entered the completed status",
    )

    is_archived = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="Archived tasks are hidden from default listings and statistics",
    )

    owner_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        comment="Reference to the user who created this task",
    )

    owner = relationship(
        "User",
        back_populates="tasks",
        lazy="selectin",
        doc="User who created this task",
    )

    tag_links = relationship(
        "TaskTag",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskTag.position",
        lazy="selectin",
        doc="Tag rows in the order the client supplied them",
    )

    tags = association_proxy(
        "tag_links",
        "name",
        creator=lambda name: TaskTag(name=name),
    )

    def set_tags(self, names: list[str]) -> None:
        """Replace the tag collection, keeping the given order."""
        self.tag_links = [
            TaskTag(name=name, position=position) for position, name in enumerate(names)
        ]

    @validates("status")
    def validate_status(self, key, value):
        if value not in TASK_STATUSES:
            raise ValueError(f"Invalid status: {value}")
        return value

    @validates("priority")
    def validate_priority(self, key, value):
        if value not in TASK_PRIORITIES:
            raise ValueError(f"Invalid priority: {value}")
        return value

    def __repr__(self):
        return (
            f"<Task(id={self.id}, status='{self.status}', "
            f"archived={self.is_archived}, title='{(self.title or '')[:50]}')>"
        )


class TaskTag(Base):
    """One free-text tag attached to a task."""

    __tablename__ = "task_tags"
    __table_args__ = (Index("ix_task_tags_task_id", "task_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)

    task_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
    )

    name = Column(String(30), nullable=False)

    position = Column(Integer, nullable=False, default=0)

    task = relationship("Task", back_populates="tag_links")

    def __repr__(self):
        return f"<TaskTag(task_id={self.task_id}, name='{self.name}')>"
