# app/versioning/store.py

import logging
import uuid
from typing import List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import HistoryAction
from app.models.history import HistoryEntry
from app.versioning.schema import VersionSchema

logger = logging.getLogger(__name__)


async def _next_version(db: AsyncSession, entity_type: str, entity_id: uuid.UUID) -> int:
    stmt = select(func.max(HistoryEntry.version)).where(
        HistoryEntry.entity_type == entity_type,
        HistoryEntry.entity_id == entity_id,
    )
    last_version = (await db.execute(stmt)).scalar()
    return 1 if last_version is None else last_version + 1


async def append_entry(
    db: AsyncSession,
    schema: VersionSchema,
    entity_id: uuid.UUID,
    snapshot: dict,
    changed_fields: Sequence[str],
    action: HistoryAction,
    changed_by: Optional[uuid.UUID],
) -> HistoryEntry:
    """
    Add one immutable history row to the session.

    The caller owns the transaction: nothing is committed here. The snapshot
    must carry every tracked field of the entity type.
    """
    if not isinstance(action, HistoryAction):
        raise ValueError(f"Unknown history action: {action!r}")
    if not schema.is_complete(snapshot):
        missing = [key for key in schema.keys if key not in snapshot]
        raise ValueError(
            f"Incomplete {schema.entity_type} snapshot, missing fields: {missing}"
        )

    entry = HistoryEntry(
        entity_type=schema.entity_type,
        entity_id=entity_id,
        version=await _next_version(db, schema.entity_type, entity_id),
        snapshot=dict(snapshot),
        schema_version=schema.schema_version,
        changed_fields=list(changed_fields),
        action=action,
        changed_by=changed_by,
    )
    db.add(entry)
    await db.flush()
    logger.debug(
        "History entry appended: %s %s v%s action=%s",
        schema.entity_type,
        entity_id,
        entry.version,
        action.value,
    )
    return entry


async def list_entries(
    db: AsyncSession, entity_type: str, entity_id: uuid.UUID
) -> List[HistoryEntry]:
    """Entries of one entity, newest first. Empty list when there are none."""
    stmt = (
        select(HistoryEntry)
        .where(
            HistoryEntry.entity_type == entity_type,
            HistoryEntry.entity_id == entity_id,
        )
        .order_by(HistoryEntry.changed_at.desc(), HistoryEntry.version.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_entry_for_entity(
    db: AsyncSession, entity_type: str, entity_id: uuid.UUID, entry_id: uuid.UUID
) -> Optional[HistoryEntry]:
    """
    Look up an entry by id, but only if it belongs to the given entity.
    An entry of another entity (or another entity type) yields None.
    """
    stmt = select(HistoryEntry).where(
        HistoryEntry.id == entry_id,
        HistoryEntry.entity_type == entity_type,
        HistoryEntry.entity_id == entity_id,
    )
    return (await db.execute(stmt)).scalars().first()


async def delete_entries(db: AsyncSession, entity_type: str, entity_id: uuid.UUID) -> int:
    """Remove the whole history of a deleted entity. Returns the row count."""
    stmt = delete(HistoryEntry).where(
        HistoryEntry.entity_type == entity_type,
        HistoryEntry.entity_id == entity_id,
    )
    result = await db.execute(stmt)
    return result.rowcount or 0
