"""
Base configurations and mixins for database models.

Provides the declarative base shared by every model plus mixins for UUID
primary keys and automatic creation/update timestamps. Column types are the
dialect-neutral SQLAlchemy ones so the same models run on PostgreSQL
(asyncpg) and SQLite (aiosqlite).
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.functions import now as db_now


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite hands back naive values)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


Base = declarative_base()


class TimestampMixin:
    """
    Adds created_at/updated_at columns.

    Values are stamped in Python with microsecond precision so creation order
    is preserved on stores whose CURRENT_TIMESTAMP only has second resolution.
    """

    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=db_now(),
        nullable=False,
        index=True,
        comment="Timestamp when the record was created",
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=db_now(),
        nullable=False,
        comment="Timestamp when the record was last updated",
    )


class UUIDMixin:
    """Adds a UUID4 primary key."""

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True,
        comment="Primary key using UUID4 format",
    )


__all__ = ["Base", "TimestampMixin", "UUIDMixin", "as_utc", "utcnow"]
