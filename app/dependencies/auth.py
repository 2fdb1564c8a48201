"""
Authentication dependencies for FastAPI route protection.
"""


from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_app_db
from app.db_handlers.user import UserDBHandler
from app.exceptions import Forbidden, Unauthenticated
from app.models import User
from app.utils.auth import extract_user_id_from_token
from app.utils.logger import setup_logger

logger = setup_logger("dependencies.auth")

# Missing headers are reported by get_current_user, not by HTTPBearer
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_app_db),
) -> User:
    """
    Resolve the bearer token to an active user.

    Raises Unauthenticated when the token is missing, malformed, expired,
    badly signed or names no user; Forbidden when the account is deactivated.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Not authorized, no token provided")

    user_id = extract_user_id_from_token(credentials.credentials)
    if user_id is None:
        logger.warning("Rejected bearer token that failed verification")
        raise Unauthenticated("Not authorized, token failed")

    user = await UserDBHandler().get(user_id, db=db)
    if user is None:
        logger.warning(f"Bearer token names unknown user {user_id}")
        raise Unauthenticated("Not authorized, user not found")

    if not user.is_active:
        logger.warning(f"Rejected request from deactivated user {user_id}")
        raise Forbidden("Account is deactivated")

    return user
