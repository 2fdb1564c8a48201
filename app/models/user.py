"""
User model for authentication and task ownership.

Architecture:
    User → Task → TaskTag

Key Features:
    - Unique, lower-cased email used as the login identifier
    - bcrypt password hash, never serialized
    - Role (user/admin) and soft-deactivation flag
    - Last-login tracking
"""

from sqlalchemy import Boolean, Column, DateTime, Index, String, true
from sqlalchemy.orm import relationship, validates

from app.models.base import Base, TimestampMixin, UUIDMixin

USER_ROLES = ("user", "admin")


class User(Base, UUIDMixin, TimestampMixin):
    """
    Registered account that owns tasks.

    Accounts are never physically removed by normal flows; deleting an
    account flips `is_active` to False and leaves its tasks in place.
    """

    __tablename__ = "users"
    __table_args__ = (Index("ix_users_email", "email", unique=True),)

    name = Column(String(50), nullable=False, comment="Display name")

    email = Column(
        String(255),
        nullable=False,
        comment="Unique, case-normalized email used for login",
    )

    hashed_password = Column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password for secure authentication",
    )

    avatar = Column(String(500), nullable=True, comment="Avatar image URL")

    role = Column(
        String(10),
        nullable=False,
        default="user",
        server_default="user",
        comment="Account role: user/admin",
    )

    is_active = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
        comment="False once the account has been deactivated",
    )

    last_login = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="Timestamp of the most recent successful login",
    )

    # No cascade: deactivation is a soft mutation and tasks stay intact
    tasks = relationship(
        "Task",
        back_populates="owner",
        doc="Tasks created by this user",
    )

    @validates("email")
    def normalize_email(self, key, value):
        return value.strip().lower() if value else value

    @validates("role")
    def validate_role(self, key, value):
        if value not in USER_ROLES:
            raise ValueError(f"Invalid role: {value}")
        return value

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', active={self.is_active})>"
