# app/schemas/contract.py

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator
from pydantic_core import PydanticCustomError

from app.models.enums import ContractStatus
from app.schemas.common import CamelModel, DateOnly, PatchModel
from app.schemas.user import UserSummary


def _money():
    return Field(None, ge=0, max_digits=12, decimal_places=2)


def _check_validity(start, end):
    if start and end and end < start:
        raise PydanticCustomError(
            "invalid_date_order", "validityEnd must not precede validityStart"
        )


class ContractCreate(CamelModel):
    contract_number: str = Field(..., min_length=1, max_length=64, examples=["Д-2025-014"])
    contract_date: DateOnly
    status: ContractStatus = ContractStatus.DRAFT
    direction_id: Optional[str] = Field(None, max_length=64)
    manager_id: Optional[UUID] = None
    surveyor_id: Optional[UUID] = None
    measurement_id: Optional[UUID] = None
    office_id: Optional[UUID] = None
    validity_start: Optional[DateOnly] = None
    validity_end: Optional[DateOnly] = None
    installation_date: Optional[DateOnly] = None
    delivery_date: Optional[DateOnly] = None
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_address: Optional[str] = Field(None, max_length=500)
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_id: Optional[str] = Field(None, max_length=64)
    discount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    total_amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    advance_amount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = None
    source: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def check_dates(self):
        _check_validity(self.validity_start, self.validity_end)
        return self


class ContractUpdate(PatchModel):
    NOT_NULLABLE = (
        "contract_number",
        "contract_date",
        "status",
        "customer_name",
        "discount",
        "total_amount",
        "advance_amount",
    )

    contract_number: Optional[str] = Field(None, min_length=1, max_length=64)
    contract_date: Optional[DateOnly] = None
    status: Optional[ContractStatus] = None
    direction_id: Optional[str] = Field(None, max_length=64)
    manager_id: Optional[UUID] = None
    surveyor_id: Optional[UUID] = None
    measurement_id: Optional[UUID] = None
    office_id: Optional[UUID] = None
    validity_start: Optional[DateOnly] = None
    validity_end: Optional[DateOnly] = None
    installation_date: Optional[DateOnly] = None
    delivery_date: Optional[DateOnly] = None
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_address: Optional[str] = Field(None, max_length=500)
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_id: Optional[str] = Field(None, max_length=64)
    discount: Optional[Decimal] = _money()
    total_amount: Optional[Decimal] = _money()
    advance_amount: Optional[Decimal] = _money()
    notes: Optional[str] = None
    source: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def check_dates(self):
        _check_validity(self.validity_start, self.validity_end)
        return self


class ContractRead(CamelModel):
    id: UUID
    contract_number: str
    contract_date: DateOnly
    status: ContractStatus
    direction_id: Optional[str] = None
    manager_id: Optional[UUID] = None
    surveyor_id: Optional[UUID] = None
    measurement_id: Optional[UUID] = None
    office_id: Optional[UUID] = None
    validity_start: Optional[DateOnly] = None
    validity_end: Optional[DateOnly] = None
    installation_date: Optional[DateOnly] = None
    delivery_date: Optional[DateOnly] = None
    customer_name: str
    customer_address: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_id: Optional[str] = None
    discount: Decimal
    total_amount: Decimal
    advance_amount: Decimal
    notes: Optional[str] = None
    source: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    manager: Optional[UserSummary] = None
    surveyor: Optional[UserSummary] = None
