# app/utils/deps.py

import logging
from typing import Any, Callable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.user import User, UserRole
from app.services.auth_service import get_user_by_id
from app.utils.exceptions import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("app.security")

# OAuth2 scheme will look for “Authorization: Bearer <token>”
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Decode JWT and fetch the acting user from DB.
    Logs warnings on invalid token usage or inactive user.
    """
    try:
        payload: dict[str, Any] = decode_access_token(token)
    except ValueError:
        security_logger.warning("Invalid JWT token provided.")
        raise UnauthorizedError("Invalid token")

    user_id = payload.get("sub")
    if not isinstance(user_id, str):
        security_logger.warning("JWT token missing or has invalid 'sub' claim.")
        raise UnauthorizedError("Invalid token payload")

    user = await get_user_by_id(db, user_id)
    if not user or not user.is_active:
        security_logger.warning(
            "Attempted authentication with inactive or non-existent user (user_id=%s)",
            user_id,
        )
        raise UnauthorizedError("Inactive or non-existent user")

    return user


def require_roles(*roles: UserRole) -> Callable:
    """
    Dependency factory to check if current user has one of the given roles.
    Logs warning on forbidden access attempt.
    """

    async def role_checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            security_logger.warning(
                "Access denied for user '%s': required one of %s, actual role '%s'",
                user.email,
                [role.value for role in roles],
                user.role.value,
            )
            raise ForbiddenError("Insufficient role for this operation")
        return user

    return role_checker
