# app/core/security.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

security_logger = logging.getLogger("app.security")


def get_password_hash(password: str) -> str:
    """
    Hash plaintext password using bcrypt.
    """
    try:
        return pwd_context.hash(password)
    except Exception as exc:
        security_logger.critical("Password hashing failed: %s", exc, exc_info=True)
        raise


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify plaintext password against stored bcrypt hash.
    A malformed hash counts as a mismatch.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as exc:
        security_logger.warning("Password verification failed: %s", exc)
        return False


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    subject: str, role: str, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed JWT access token.
    Payload: sub (user id), role, iat, exp, iss, aud.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    now = _now()
    payload: Dict[str, Any] = {
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": now + expires_delta,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    }
    return jwt.encode(
        payload,
        settings.ACCESS_TOKEN_SECRET,
        algorithm=settings.ACCESS_TOKEN_ALGORITHM,
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT access token, verifying audience and issuer.
    """
    try:
        return jwt.decode(
            token,
            settings.ACCESS_TOKEN_SECRET,
            algorithms=[settings.ACCESS_TOKEN_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as e:
        security_logger.warning("Access token decode failed: %s", e)
        raise ValueError("Invalid access token") from e
