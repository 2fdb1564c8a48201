# Authentication API routes for registration, login and session identity

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_app_db
from app.db_handlers.user import UserDBHandler
from app.dependencies.auth import get_current_user
from app.exceptions import Forbidden, Unauthenticated
from app.models import User
from app.schemas import (
    ApiResponse,
    AuthPayload,
    UserLogin,
    UserOut,
    UserRegister,
    error_responses,
)
from app.utils.auth import create_access_token, get_password_hash, verify_password
from app.utils.logger import setup_logger

logger = setup_logger("api.auth")

router = APIRouter(
    prefix="/api/auth",
    tags=["Authentication"],
    responses=error_responses(401, 403, 409, 422),
)


def _auth_payload(user: User) -> AuthPayload:
    return AuthPayload(
        token=create_access_token(user.id), user=UserOut.model_validate(user)
    )


@router.post(
    "/register",
    response_model=ApiResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
)
async def register_user(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_app_db),
    user_db_handler: UserDBHandler = Depends(),
):
    """Register a new account and return a bearer token for it."""
    user = await user_db_handler.register_user(
        name=user_data.name,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        db=db,
    )
    logger.info(f"Registered user {user.id}")
    return ApiResponse(
        message="User registered successfully", data=_auth_payload(user)
    )


@router.post("/login", response_model=ApiResponse[AuthPayload])
async def login_user(
    user_data: UserLogin,
    db: AsyncSession = Depends(get_app_db),
    user_db_handler: UserDBHandler = Depends(),
):
    """Authenticate by email and password and return a bearer token."""
    user = await user_db_handler.get_user_by_email(user_data.email, db=db)

    if not user or not verify_password(user_data.password, user.hashed_password):
        logger.warning("Failed login attempt")
        raise Unauthenticated("Invalid credentials")

    if not user.is_active:
        raise Forbidden("Account is deactivated")

    user = await user_db_handler.record_login(user, db=db)
    logger.info(f"User {user.id} logged in")
    return ApiResponse(message="Login successful", data=_auth_payload(user))


@router.get("/me", response_model=ApiResponse[UserOut])
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Retrieve the authenticated user's profile."""
    return ApiResponse(data=UserOut.model_validate(current_user))


@router.post("/logout", response_model=ApiResponse[None])
async def logout_user(current_user: User = Depends(get_current_user)):
    """Acknowledge logout; tokens are stateless, so the client discards its copy."""
    logger.info(f"User {current_user.id} logged out")
    return ApiResponse(message="Logged out successfully")
