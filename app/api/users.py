"""
User Management API Routes - profile, password and account lifecycle.

All routes act on the authenticated caller only.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_app_db
from app.db_handlers import TaskDBHandler, UserDBHandler
from app.dependencies.auth import get_current_user
from app.exceptions import BadRequest
from app.models import User
from app.models.base import utcnow
from app.schemas import (
    ApiResponse,
    PasswordChange,
    ProfileUpdate,
    TaskStats,
    UserOut,
    UserStats,
    UserSummary,
    error_responses,
)
from app.services.task_stats import day_bounds, resolve_timezone
from app.utils.auth import get_password_hash, verify_password
from app.utils.logger import setup_logger

logger = setup_logger("api.users")

router = APIRouter(
    prefix="/api/users",
    tags=["User Management"],
    responses=error_responses(400, 401, 403, 409, 422),
)


@router.get("/profile", response_model=ApiResponse[UserOut])
async def get_profile(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=UserOut.model_validate(current_user))


@router.put("/profile", response_model=ApiResponse[UserOut])
async def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_app_db),
    user_db_handler: UserDBHandler = Depends(),
):
    """Update the allow-listed profile fields (name, email, avatar)."""
    changes = profile.changes()
    user = current_user
    if changes:
        user = await user_db_handler.update_profile(current_user, changes, db=db)
    return ApiResponse(
        message="Profile updated successfully", data=UserOut.model_validate(user)
    )


@router.put("/change-password", response_model=ApiResponse[None])
async def change_password(
    passwords: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_app_db),
    user_db_handler: UserDBHandler = Depends(),
):
    if not verify_password(passwords.current_password, current_user.hashed_password):
        raise BadRequest("Current password is incorrect")

    await user_db_handler.set_password(
        current_user, get_password_hash(passwords.new_password), db=db
    )
    logger.info(f"Password changed for user {current_user.id}")
    return ApiResponse(message="Password changed successfully")


@router.delete("/account", response_model=ApiResponse[None])
async def delete_account(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_app_db),
    user_db_handler: UserDBHandler = Depends(),
):
    """Soft-delete the account. Its tasks are left in place."""
    await user_db_handler.deactivate(current_user, db=db)
    return ApiResponse(message="Account deactivated successfully")


@router.get("/stats", response_model=ApiResponse[UserStats])
async def get_user_stats(
    tz: str | None = Query(None, description="IANA timezone defining 'today'"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_app_db),
    task_db_handler: TaskDBHandler = Depends(),
):
    now = utcnow()
    day_start, day_end = day_bounds(now, resolve_timezone(tz))
    stats = await task_db_handler.get_task_stats(
        current_user.id, now=now, day_start=day_start, day_end=day_end, db=db
    )
    return ApiResponse(
        data=UserStats(
            user=UserSummary(
                name=current_user.name,
                email=current_user.email,
                joined_at=current_user.created_at,
                last_login=current_user.last_login,
            ),
            tasks=TaskStats(**stats),
        )
    )
