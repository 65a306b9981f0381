# app/schemas/user.py

from typing import Optional
from uuid import UUID

from pydantic import Field

from app.models.enums import UserRole
from app.schemas.common import CamelModel


class UserSummary(CamelModel):
    """
    Compact user reference embedded in entities and history entries.
    """

    id: UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class UserRead(CamelModel):
    """
    Read-only user schema for API responses.
    """

    id: UUID = Field(..., description="User unique identifier")
    email: str = Field(..., description="User's email address")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool = Field(..., description="Is the user active")
    role: UserRole = Field(..., description="User role")
