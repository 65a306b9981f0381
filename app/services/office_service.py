# app/services/office_service.py

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.contract import Contract
from app.models.office import Office
from app.versioning import TrackedField, VersionedRepository, VersionSchema

logger = logging.getLogger(__name__)

OFFICE_SCHEMA = VersionSchema(
    entity_type="office",
    model=Office,
    label="Office",
    fields=(
        TrackedField("name", "name"),
        TrackedField("prefix", "prefix"),
        TrackedField("address", "address"),
        TrackedField("phone", "phone"),
        TrackedField("is_active", "isActive"),
        TrackedField("sort_order", "sortOrder"),
    ),
)

office_repo = VersionedRepository(OFFICE_SCHEMA)


async def create_office(db: AsyncSession, data: dict) -> Office:
    return await office_repo.create(db, data)


async def list_offices(db: AsyncSession, include_inactive: bool = False) -> List[Office]:
    stmt = select(Office)
    if not include_inactive:
        stmt = stmt.where(Office.is_active.is_(True))
    stmt = stmt.order_by(Office.sort_order, Office.name)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_office(db: AsyncSession, office_id: uuid.UUID) -> Office:
    return await office_repo.get_or_404(db, office_id)


async def update_office(
    db: AsyncSession,
    office_id: uuid.UUID,
    patch: dict,
    acting_user_id: Optional[uuid.UUID],
) -> Office:
    return await office_repo.update(db, office_id, patch, acting_user_id)


async def delete_office(
    db: AsyncSession, office_id: uuid.UUID, acting_user_id: Optional[uuid.UUID]
) -> bool:
    """
    Delete an office with its history. An office still referenced by contracts
    is deactivated instead, as a regular versioned update.
    Returns True if the office was deleted, False if it was deactivated.
    """
    if not await office_repo.exists(db, office_id):
        raise office_repo.not_found(office_id)

    stmt = select(Contract.id).where(Contract.office_id == office_id).limit(1)
    in_use = (await db.execute(stmt)).scalar() is not None
    if in_use:
        logger.info("Office %s is referenced by contracts, deactivating", office_id)
        await office_repo.update(db, office_id, {"is_active": False}, acting_user_id)
        return False

    await office_repo.delete(db, office_id, acting_user_id)
    return True
