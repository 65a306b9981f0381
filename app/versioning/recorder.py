# app/versioning/recorder.py

import logging
import uuid
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import HistoryAction
from app.models.history import HistoryEntry
from app.versioning.schema import VersionSchema
from app.versioning.store import append_entry

logger = logging.getLogger(__name__)


def compute_changed_fields(schema: VersionSchema, patch: Mapping[str, Any]) -> list[str]:
    """
    Snapshot keys of the tracked fields present in ``patch``.

    Presence is what counts: writing the same value again still reports the
    field. Keys follow the schema's declaration order. ``patch`` is keyed by
    ORM attribute name.
    """
    return [f.key for f in schema.fields if f.attr in patch]


async def record_before_update(
    db: AsyncSession,
    schema: VersionSchema,
    entity_id: uuid.UUID,
    current_state: Mapping[str, Any],
    patch: Mapping[str, Any],
    acting_user_id: Optional[uuid.UUID],
) -> Optional[HistoryEntry]:
    """
    Write the pre-update snapshot of an entity.

    ``current_state`` is the serialized snapshot read inside the update's
    transaction. Nothing is written when there is no acting user (system
    updates are not versioned). A patch touching no tracked field still
    records an entry, with empty ``changed_fields``.
    The caller is responsible for having resolved the entity (404 otherwise).
    """
    if acting_user_id is None:
        logger.debug(
            "No acting user for %s %s update, history not recorded",
            schema.entity_type,
            entity_id,
        )
        return None

    return await append_entry(
        db,
        schema,
        entity_id,
        snapshot=dict(current_state),
        changed_fields=compute_changed_fields(schema, patch),
        action=HistoryAction.UPDATE,
        changed_by=acting_user_id,
    )
