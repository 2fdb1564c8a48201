from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.exceptions import Conflict
from app.models.base import utcnow
from app.models.user import User
from app.utils.logger import setup_logger

logger = setup_logger("db_handlers.user")


class UserDBHandler(BaseDBHandler[User]):
    def __init__(self):
        super().__init__(User)

    @check_local_db
    async def get_user_by_email(
        self, email: str, *, db: AsyncSession = None
    ) -> User | None:
        """Get a user by (case-normalized) email."""
        try:
            stmt = select(User).filter(User.email == email.strip().lower())
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user by email '{email}': {e}")
            raise

    @check_local_db
    async def email_taken(
        self,
        email: str,
        *,
        exclude_user_id: uuid.UUID | None = None,
        db: AsyncSession = None,
    ) -> bool:
        existing = await self.get_user_by_email(email, db=db)
        return existing is not None and existing.id != exclude_user_id

    @check_local_db
    async def register_user(
        self, name: str, email: str, hashed_password: str, *, db: AsyncSession = None
    ) -> User:
        if await self.email_taken(email, db=db):
            raise Conflict("User already exists with this email")
        try:
            return await self.create(
                {"name": name, "email": email, "hashed_password": hashed_password},
                db=db,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same email
            raise Conflict("User already exists with this email") from e

    @check_local_db
    async def record_login(self, user: User, *, db: AsyncSession = None) -> User:
        return await self.update(user, {"last_login": utcnow()}, db=db)

    @check_local_db
    async def update_profile(
        self, user: User, changes: dict[str, Any], *, db: AsyncSession = None
    ) -> User:
        if "email" in changes and await self.email_taken(
            changes["email"], exclude_user_id=user.id, db=db
        ):
            raise Conflict("Email already exists")
        try:
            updated = await self.update(user, changes, db=db)
        except IntegrityError as e:
            raise Conflict("Email already exists") from e
        logger.info(f"Updated profile fields {sorted(changes)} for user {user.id}")
        return updated

    @check_local_db
    async def set_password(
        self, user: User, hashed_password: str, *, db: AsyncSession = None
    ) -> User:
        return await self.update(user, {"hashed_password": hashed_password}, db=db)

    @check_local_db
    async def deactivate(self, user: User, *, db: AsyncSession = None) -> User:
        """Soft-delete: flip the active flag, keep the row and its tasks."""
        updated = await self.update(user, {"is_active": False}, db=db)
        logger.info(f"Deactivated user {user.id}")
        return updated
