# app/services/contract_service.py

import logging
import uuid
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.contract import Contract
from app.models.enums import ContractStatus
from app.models.measurement import Measurement
from app.models.office import Office
from app.services.auth_service import ensure_users_exist
from app.utils.exceptions import ConflictError, ValidationError
from app.utils.pagination import paginate
from app.versioning import FieldKind, TrackedField, VersionedRepository, VersionSchema

logger = logging.getLogger(__name__)

CONTRACT_SCHEMA = VersionSchema(
    entity_type="contract",
    model=Contract,
    label="Contract",
    fields=(
        TrackedField("contract_number", "contractNumber"),
        TrackedField("contract_date", "contractDate", FieldKind.DATE),
        TrackedField("status", "status", FieldKind.ENUM, ContractStatus),
        TrackedField("direction_id", "directionId"),
        TrackedField("manager_id", "managerId", FieldKind.UUID),
        TrackedField("surveyor_id", "surveyorId", FieldKind.UUID),
        TrackedField("validity_start", "validityStart", FieldKind.DATE),
        TrackedField("validity_end", "validityEnd", FieldKind.DATE),
        TrackedField("installation_date", "installationDate", FieldKind.DATE),
        TrackedField("delivery_date", "deliveryDate", FieldKind.DATE),
        TrackedField("customer_name", "customerName"),
        TrackedField("customer_address", "customerAddress"),
        TrackedField("customer_phone", "customerPhone"),
        TrackedField("customer_id", "customerId"),
        TrackedField("discount", "discount", FieldKind.DECIMAL),
        TrackedField("total_amount", "totalAmount", FieldKind.DECIMAL),
        TrackedField("advance_amount", "advanceAmount", FieldKind.DECIMAL),
        TrackedField("notes", "notes"),
        TrackedField("source", "source"),
        TrackedField("measurement_id", "measurementId", FieldKind.UUID),
        TrackedField("office_id", "officeId", FieldKind.UUID),
    ),
    load_options=lambda: (
        selectinload(Contract.manager),
        selectinload(Contract.surveyor),
    ),
)


async def _ensure_number_free(
    db: AsyncSession, contract_number: str, exclude_id: Optional[uuid.UUID] = None
) -> None:
    stmt = select(Contract.id).where(Contract.contract_number == contract_number)
    if exclude_id is not None:
        stmt = stmt.where(Contract.id != exclude_id)
    if (await db.execute(stmt)).scalar() is not None:
        logger.info("Contract number already in use: %s", contract_number)
        raise ConflictError(f"Contract number {contract_number} already exists")


async def _check_references(db: AsyncSession, data: dict) -> None:
    await ensure_users_exist(
        db, managerId=data.get("manager_id"), surveyorId=data.get("surveyor_id")
    )
    measurement_id = data.get("measurement_id")
    if measurement_id is not None:
        found = await db.execute(
            select(Measurement.id).where(Measurement.id == measurement_id)
        )
        if found.scalar() is None:
            raise ValidationError(f"Measurement {measurement_id} does not exist")
    office_id = data.get("office_id")
    if office_id is not None:
        found = await db.execute(select(Office.id).where(Office.id == office_id))
        if found.scalar() is None:
            raise ValidationError(f"Office {office_id} does not exist")


class ContractRepository(VersionedRepository):
    async def check_restore(self, db, entity, snapshot):
        number = snapshot.get("contractNumber")
        if number is not None:
            await _ensure_number_free(db, number, exclude_id=entity.id)
        refs = {
            tracked.attr: tracked.deserialize(snapshot.get(tracked.key))
            for tracked in self.schema.fields
            if tracked.kind is FieldKind.UUID
        }
        try:
            await _check_references(db, refs)
        except ValidationError as exc:
            raise ConflictError(
                f"Cannot restore contract {entity.id}: {exc.detail}"
            ) from exc


contract_repo = ContractRepository(CONTRACT_SCHEMA)


async def create_contract(db: AsyncSession, data: dict) -> Contract:
    await _ensure_number_free(db, data["contract_number"])
    await _check_references(db, data)
    return await contract_repo.create(db, data)


async def list_contracts(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 20,
    status: Optional[ContractStatus] = None,
    manager_id: Optional[uuid.UUID] = None,
    office_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> Tuple[List[Contract], int]:
    """
    Filtered, paginated listing. ``search`` matches contract number, customer
    name and phone; the date range applies to the contract date (inclusive).
    """
    stmt = select(Contract).options(*CONTRACT_SCHEMA.load_options())
    if status is not None:
        stmt = stmt.where(Contract.status == status)
    if manager_id is not None:
        stmt = stmt.where(Contract.manager_id == manager_id)
    if office_id is not None:
        stmt = stmt.where(Contract.office_id == office_id)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Contract.contract_number.ilike(pattern),
                Contract.customer_name.ilike(pattern),
                Contract.customer_phone.ilike(pattern),
            )
        )
    if date_from is not None:
        stmt = stmt.where(Contract.contract_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Contract.contract_date <= date_to)
    stmt = stmt.order_by(Contract.contract_date.desc(), Contract.created_at.desc())

    items, total = await paginate(db, stmt, page, limit)
    logger.debug("Listed contracts: page=%d count=%d total=%d", page, len(items), total)
    return items, total


async def get_contract(db: AsyncSession, contract_id: uuid.UUID) -> Contract:
    return await contract_repo.get_or_404(db, contract_id)


async def update_contract(
    db: AsyncSession,
    contract_id: uuid.UUID,
    patch: dict,
    acting_user_id: Optional[uuid.UUID],
) -> Contract:
    if "contract_number" in patch:
        await _ensure_number_free(db, patch["contract_number"], exclude_id=contract_id)
    await _check_references(db, patch)
    return await contract_repo.update(db, contract_id, patch, acting_user_id)


async def delete_contract(
    db: AsyncSession, contract_id: uuid.UUID, acting_user_id: Optional[uuid.UUID]
) -> None:
    await contract_repo.delete(db, contract_id, acting_user_id)
