# app/services/auth_service.py

import logging
import uuid
from typing import Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.enums import ADMIN_ROLES, UserRole
from app.models.user import User
from app.schemas.auth import LoginRequest
from app.utils.exceptions import UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")
security_logger = logging.getLogger("app.security")


async def authenticate_user(db: AsyncSession, data: LoginRequest) -> User:
    """
    Authenticate credentials:
    - lookup by email (case-insensitive)
    - verify password match
    - reject deactivated accounts
    """
    stmt = select(User).where(User.email == data.email.lower())
    user = (await db.execute(stmt)).scalars().first()
    if not user or not verify_password(data.password, user.hashed_password):
        security_logger.warning("Failed login attempt for email=%s", data.email)
        raise UnauthorizedError("Invalid email or password")
    if not user.is_active:
        security_logger.warning("Login attempt on inactive account id=%s", user.id)
        raise UnauthorizedError("Account is deactivated")
    logger.info("User authenticated: id=%s email=%s", user.id, user.email)
    audit_logger.info("User login: id=%s email=%s role=%s", user.id, user.email, user.role.value)
    return user


async def get_user_by_id(db: AsyncSession, user_id: str | uuid.UUID) -> User | None:
    """
    Fetch user by UUID (string or UUID).
    """
    try:
        user_uuid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
    except ValueError:
        logger.warning("Malformed user id: %s", user_id)
        return None
    user = (await db.execute(select(User).where(User.id == user_uuid))).scalars().first()
    if user:
        logger.debug("Fetched user by id: %s", user_id)
    else:
        logger.warning("User not found by id: %s", user_id)
    return user


async def get_users_by_ids(
    db: AsyncSession, user_ids: Iterable[uuid.UUID]
) -> Dict[uuid.UUID, User]:
    """
    Map of id -> User for the ids that still exist. Missing ids are simply absent.
    """
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {user.id: user for user in result.scalars().all()}


async def ensure_users_exist(db: AsyncSession, **refs: Optional[uuid.UUID]) -> None:
    """
    Validate user references of a payload, e.g. ensure_users_exist(db, manager_id=...).
    None values are skipped.
    """
    wanted = {name: uid for name, uid in refs.items() if uid is not None}
    if not wanted:
        return
    found = await get_users_by_ids(db, wanted.values())
    for name, uid in wanted.items():
        if uid not in found:
            raise ValidationError(f"User {uid} referenced by {name} does not exist")


def create_access_token_for_user(user: User) -> str:
    """
    Issue access token embedding user's role.
    """
    logger.debug("Issuing access token for user_id=%s role=%s", user.id, user.role)
    return create_access_token(subject=str(user.id), role=user.role.value)


async def upsert_admin(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
    role: UserRole = UserRole.ADMIN,
) -> tuple[User, bool]:
    """
    Create an administrator, or promote an existing account with that email.
    The password of an existing account is left unchanged.
    Returns (user, created).
    """
    if role not in ADMIN_ROLES:
        raise ValueError(f"{role} is not an administrator role")
    email = email.strip().lower()
    try:
        user = (await db.execute(select(User).where(User.email == email))).scalars().first()
        created = user is None
        if created:
            user = User(
                email=email,
                hashed_password=get_password_hash(password),
                first_name=first_name,
                last_name=last_name,
                role=role,
                is_active=True,
            )
            db.add(user)
        else:
            user.role = role
            user.is_active = True
            if first_name is not None:
                user.first_name = first_name
            if last_name is not None:
                user.last_name = last_name
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("DB error during admin upsert: %s", exc, exc_info=True)
        raise

    audit_logger.info(
        "Administrator %s: id=%s email=%s role=%s",
        "created" if created else "promoted",
        user.id,
        user.email,
        role.value,
    )
    return user, created
