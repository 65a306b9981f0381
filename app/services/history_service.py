# app/services/history_service.py

import logging
from typing import Any, List
from uuid import UUID

import jsondiff
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.history import HistoryEntry
from app.models.user import User
from app.schemas.history import HistoryRead
from app.schemas.user import UserSummary
from app.services.auth_service import get_users_by_ids
from app.utils.exceptions import NotFoundError
from app.versioning import VersionedRepository
from app.versioning.store import get_entry_for_entity, list_entries

logger = logging.getLogger(__name__)


def _entry_not_found(repo: VersionedRepository, entity_id: UUID, history_id: UUID):
    return NotFoundError(
        f"History entry {history_id} not found for "
        f"{repo.schema.label.lower()} {entity_id}"
    )


def _to_read(entry: HistoryEntry, users: dict[UUID, User]) -> HistoryRead:
    author = users.get(entry.changed_by) if entry.changed_by else None
    return HistoryRead(
        id=entry.id,
        action=entry.action,
        changed_at=entry.changed_at,
        changed_by=UserSummary.model_validate(author) if author else None,
        changed_fields=list(entry.changed_fields or []),
        snapshot=dict(entry.snapshot),
    )


async def get_history(
    db: AsyncSession, repo: VersionedRepository, entity_id: UUID
) -> List[HistoryRead]:
    """
    All history entries of an entity, newest first, with the author resolved.
    Raises NotFoundError if the entity does not exist.
    """
    if not await repo.exists(db, entity_id):
        logger.warning("History requested for missing %s %s", repo.entity_type, entity_id)
        raise repo.not_found(entity_id)

    entries = await list_entries(db, repo.entity_type, entity_id)
    users = await get_users_by_ids(db, (e.changed_by for e in entries))
    logger.debug(
        "Fetched %d history entries for %s %s", len(entries), repo.entity_type, entity_id
    )
    return [_to_read(entry, users) for entry in entries]


async def get_history_entry(
    db: AsyncSession, repo: VersionedRepository, entity_id: UUID, history_id: UUID
) -> HistoryRead:
    if not await repo.exists(db, entity_id):
        raise repo.not_found(entity_id)
    entry = await get_entry_for_entity(db, repo.entity_type, entity_id, history_id)
    if entry is None:
        raise _entry_not_found(repo, entity_id, history_id)
    users = await get_users_by_ids(db, [entry.changed_by])
    return _to_read(entry, users)


async def diff_with_current(
    db: AsyncSession, repo: VersionedRepository, entity_id: UUID, history_id: UUID
) -> Any:
    """
    Symmetric JSON diff from the entity's current tracked fields to the
    snapshot of a history entry: ``{field: [current, snapshot]}``. An empty
    object means a rollback to this entry would change nothing.
    """
    entity = await repo.load_current(db, entity_id)
    if entity is None:
        raise repo.not_found(entity_id)
    entry = await get_entry_for_entity(db, repo.entity_type, entity_id, history_id)
    if entry is None:
        raise _entry_not_found(repo, entity_id, history_id)

    current = repo.snapshot_of(entity)
    diff = jsondiff.diff(current, entry.snapshot, syntax="symmetric", marshal=True)
    logger.debug(
        "Computed diff of %s %s against history entry %s",
        repo.entity_type,
        entity_id,
        history_id,
    )
    return diff
