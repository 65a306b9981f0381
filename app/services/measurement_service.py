# app/services/measurement_service.py

import logging
import uuid
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.enums import MeasurementStatus
from app.models.measurement import Measurement
from app.services.auth_service import ensure_users_exist
from app.utils.exceptions import ConflictError, ValidationError
from app.utils.pagination import paginate
from app.versioning import FieldKind, TrackedField, VersionedRepository, VersionSchema

logger = logging.getLogger(__name__)

MEASUREMENT_SCHEMA = VersionSchema(
    entity_type="measurement",
    model=Measurement,
    label="Measurement",
    fields=(
        TrackedField("manager_id", "managerId", FieldKind.UUID),
        TrackedField("reception_date", "receptionDate", FieldKind.DATE),
        TrackedField("execution_date", "executionDate", FieldKind.DATE),
        TrackedField("surveyor_id", "surveyorId", FieldKind.UUID),
        TrackedField("direction_id", "directionId"),
        TrackedField("customer_name", "customerName"),
        TrackedField("customer_address", "customerAddress"),
        TrackedField("customer_phone", "customerPhone"),
        TrackedField("comments", "comments"),
        TrackedField("status", "status", FieldKind.ENUM, MeasurementStatus),
        TrackedField("customer_id", "customerId"),
    ),
    load_options=lambda: (
        selectinload(Measurement.manager),
        selectinload(Measurement.surveyor),
    ),
)


class MeasurementRepository(VersionedRepository):
    async def check_restore(self, db, entity, snapshot):
        manager_id = snapshot.get("managerId")
        surveyor_id = snapshot.get("surveyorId")
        try:
            await ensure_users_exist(
                db,
                managerId=uuid.UUID(manager_id) if manager_id else None,
                surveyorId=uuid.UUID(surveyor_id) if surveyor_id else None,
            )
        except ValidationError as exc:
            raise ConflictError(
                f"Cannot restore measurement {entity.id}: {exc.detail}"
            ) from exc


measurement_repo = MeasurementRepository(MEASUREMENT_SCHEMA)


async def create_measurement(db: AsyncSession, data: dict) -> Measurement:
    await ensure_users_exist(
        db, managerId=data.get("manager_id"), surveyorId=data.get("surveyor_id")
    )
    return await measurement_repo.create(db, data)


async def list_measurements(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 20,
    status: Optional[MeasurementStatus] = None,
    manager_id: Optional[uuid.UUID] = None,
    surveyor_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> Tuple[List[Measurement], int]:
    """
    Filtered, paginated listing. ``search`` matches customer name, phone and
    address; the date range applies to the reception date (inclusive).
    """
    stmt = select(Measurement).options(*MEASUREMENT_SCHEMA.load_options())
    if status is not None:
        stmt = stmt.where(Measurement.status == status)
    if manager_id is not None:
        stmt = stmt.where(Measurement.manager_id == manager_id)
    if surveyor_id is not None:
        stmt = stmt.where(Measurement.surveyor_id == surveyor_id)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Measurement.customer_name.ilike(pattern),
                Measurement.customer_phone.ilike(pattern),
                Measurement.customer_address.ilike(pattern),
            )
        )
    if date_from is not None:
        stmt = stmt.where(Measurement.reception_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Measurement.reception_date <= date_to)
    stmt = stmt.order_by(Measurement.created_at.desc(), Measurement.id)

    items, total = await paginate(db, stmt, page, limit)
    logger.debug("Listed measurements: page=%d count=%d total=%d", page, len(items), total)
    return items, total


async def get_measurement(db: AsyncSession, measurement_id: uuid.UUID) -> Measurement:
    return await measurement_repo.get_or_404(db, measurement_id)


async def update_measurement(
    db: AsyncSession,
    measurement_id: uuid.UUID,
    patch: dict,
    acting_user_id: Optional[uuid.UUID],
) -> Measurement:
    await ensure_users_exist(
        db, managerId=patch.get("manager_id"), surveyorId=patch.get("surveyor_id")
    )
    return await measurement_repo.update(db, measurement_id, patch, acting_user_id)


async def delete_measurement(
    db: AsyncSession, measurement_id: uuid.UUID, acting_user_id: Optional[uuid.UUID]
) -> None:
    await measurement_repo.delete(db, measurement_id, acting_user_id)
