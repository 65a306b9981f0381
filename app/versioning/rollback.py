# app/versioning/rollback.py

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import HistoryAction
from app.utils.exceptions import NotFoundError
from app.versioning.repository import VersionedRepository
from app.versioning.store import append_entry, get_entry_for_entity

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")


async def rollback_entity(
    db: AsyncSession,
    repo: VersionedRepository,
    entity_id: uuid.UUID,
    history_id: uuid.UUID,
    acting_user_id: uuid.UUID,
):
    """
    Restore an entity's tracked fields from one of its history entries.

    The pre-rollback state is kept as a new ROLLBACK entry first, so a rollback
    can itself be undone. Rolling back to the current state is allowed and
    still writes an entry. Returns the re-fetched entity.
    """
    try:
        entity = await repo.load_current(db, entity_id, for_update=True)
        if entity is None:
            logger.warning(
                "Rollback failed: %s %s not found", repo.entity_type, entity_id
            )
            raise repo.not_found(entity_id)

        target = await get_entry_for_entity(db, repo.entity_type, entity_id, history_id)
        if target is None:
            logger.warning(
                "Rollback failed: history entry %s not found for %s %s",
                history_id,
                repo.entity_type,
                entity_id,
            )
            raise NotFoundError(
                f"History entry {history_id} not found for "
                f"{repo.schema.label.lower()} {entity_id}"
            )

        await repo.check_restore(db, entity, target.snapshot)

        undo_point = await append_entry(
            db,
            repo.schema,
            entity_id,
            snapshot=repo.snapshot_of(entity),
            changed_fields=[],
            action=HistoryAction.ROLLBACK,
            changed_by=acting_user_id,
        )
        repo.restore_fields(entity, target.snapshot)
        await db.commit()

    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(
            "Error rolling back %s %s to history entry %s: %s",
            repo.entity_type,
            entity_id,
            history_id,
            exc,
            exc_info=True,
        )
        raise
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Rolled back %s %s to history entry %s (v%s) by user %s",
        repo.entity_type,
        entity_id,
        history_id,
        target.version,
        acting_user_id,
    )
    audit_logger.info(
        "%s rollback: id=%s to history=%s undo_point=%s by user=%s",
        repo.schema.label,
        entity_id,
        history_id,
        undo_point.id,
        acting_user_id,
    )
    return await repo.get_or_404(db, entity_id)
