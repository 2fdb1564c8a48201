"""
Database models for the Taskboard API.

Architecture: User → Task → TaskTag ownership chain.
"""

from app.models.task import (
    CLOSED_STATUSES,
    TASK_PRIORITIES,
    TASK_STATUSES,
    Task,
    TaskTag,
)
from app.models.user import USER_ROLES, User

__all__ = [
    "User",
    "Task",
    "TaskTag",
    "TASK_STATUSES",
    "TASK_PRIORITIES",
    "CLOSED_STATUSES",
    "USER_ROLES",
]
