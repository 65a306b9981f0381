# app/models/measurement.py

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.enums import MeasurementStatus


class Measurement(Base):
    """
    On-site measurement request: the first step of the sales funnel.
    """

    __tablename__ = "measurements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    manager_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    surveyor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # Owned by modules outside this service, kept as raw ids
    direction_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    customer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    reception_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    execution_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    customer_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[MeasurementStatus] = mapped_column(
        SAEnum(MeasurementStatus, name="measurement_status", native_enum=False),
        nullable=False,
        default=MeasurementStatus.NEW,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    manager = relationship("User", foreign_keys=[manager_id], lazy="raise")
    surveyor = relationship("User", foreign_keys=[surveyor_id], lazy="raise")
