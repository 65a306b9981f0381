# app/schemas/office.py

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.schemas.common import CamelModel, PatchModel


class OfficeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Showroom North"])
    prefix: Optional[str] = Field(None, max_length=20, examples=["N"])
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=50)
    is_active: bool = True
    sort_order: int = Field(0, ge=0)


class OfficeUpdate(PatchModel):
    NOT_NULLABLE = ("name", "is_active", "sort_order")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    prefix: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)


class OfficeRead(CamelModel):
    id: UUID
    name: str
    prefix: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime
