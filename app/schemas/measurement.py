# app/schemas/measurement.py

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator
from pydantic_core import PydanticCustomError

from app.models.enums import MeasurementStatus
from app.schemas.common import CamelModel, DateOnly, PatchModel
from app.schemas.user import UserSummary


class MeasurementCreate(CamelModel):
    manager_id: UUID = Field(..., description="Responsible manager")
    reception_date: DateOnly = Field(..., examples=["2025-03-01"])
    execution_date: Optional[DateOnly] = None
    surveyor_id: Optional[UUID] = None
    direction_id: Optional[str] = Field(None, max_length=64)
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_address: Optional[str] = Field(None, max_length=500)
    customer_phone: str = Field(..., min_length=1, max_length=50)
    comments: Optional[str] = None
    status: MeasurementStatus = MeasurementStatus.NEW
    customer_id: Optional[str] = Field(None, max_length=64)

    @model_validator(mode="after")
    def check_dates(self):
        if self.execution_date and self.execution_date < self.reception_date:
            raise PydanticCustomError(
                "invalid_date_order", "executionDate must not precede receptionDate"
            )
        return self


class MeasurementUpdate(PatchModel):
    NOT_NULLABLE = (
        "manager_id",
        "reception_date",
        "customer_name",
        "customer_phone",
        "status",
    )

    manager_id: Optional[UUID] = None
    reception_date: Optional[DateOnly] = None
    execution_date: Optional[DateOnly] = None
    surveyor_id: Optional[UUID] = None
    direction_id: Optional[str] = Field(None, max_length=64)
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_address: Optional[str] = Field(None, max_length=500)
    customer_phone: Optional[str] = Field(None, min_length=1, max_length=50)
    comments: Optional[str] = None
    status: Optional[MeasurementStatus] = None
    customer_id: Optional[str] = Field(None, max_length=64)

    @model_validator(mode="after")
    def check_dates(self):
        # only comparable when the patch carries both dates
        if (
            self.execution_date
            and self.reception_date
            and self.execution_date < self.reception_date
        ):
            raise PydanticCustomError(
                "invalid_date_order", "executionDate must not precede receptionDate"
            )
        return self


class MeasurementRead(CamelModel):
    id: UUID
    manager_id: Optional[UUID] = None
    reception_date: DateOnly
    execution_date: Optional[DateOnly] = None
    surveyor_id: Optional[UUID] = None
    direction_id: Optional[str] = None
    customer_name: str
    customer_address: Optional[str] = None
    customer_phone: str
    comments: Optional[str] = None
    status: MeasurementStatus
    customer_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    manager: Optional[UserSummary] = None
    surveyor: Optional[UserSummary] = None
