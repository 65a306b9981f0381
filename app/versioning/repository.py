# app/versioning/repository.py

import logging
import uuid
from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.utils.exceptions import NotFoundError
from app.versioning.recorder import record_before_update
from app.versioning.schema import VersionSchema
from app.versioning.store import delete_entries

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")


class VersionedRepository:
    """
    Persistence helpers shared by every versioned entity type.

    Mutations run as a single transaction holding a row lock on the entity,
    so the pre-update snapshot and the update itself cannot interleave with
    another writer.
    """

    def __init__(self, schema: VersionSchema) -> None:
        self.schema = schema
        self.model = schema.model

    @property
    def entity_type(self) -> str:
        return self.schema.entity_type

    def not_found(self, entity_id) -> NotFoundError:
        return NotFoundError(f"{self.schema.label} with ID {entity_id} not found")

    async def load_current(
        self, db: AsyncSession, entity_id: uuid.UUID, *, for_update: bool = False
    ):
        """Entity as currently persisted, or None. ``for_update`` locks the row."""
        stmt = (
            select(self.model)
            .where(self.model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return (await db.execute(stmt)).scalars().first()

    async def get_or_404(self, db: AsyncSession, entity_id: uuid.UUID):
        """Entity with the relations clients expect, or NotFoundError."""
        stmt = (
            select(self.model)
            .options(*self.schema.load_options())
            .where(self.model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        entity = (await db.execute(stmt)).scalars().first()
        if entity is None:
            raise self.not_found(entity_id)
        return entity

    async def exists(self, db: AsyncSession, entity_id: uuid.UUID) -> bool:
        stmt = select(self.model.id).where(self.model.id == entity_id)
        return (await db.execute(stmt)).scalar() is not None

    def snapshot_of(self, entity) -> dict[str, Any]:
        return self.schema.snapshot(entity)

    def apply_patch(self, entity, patch: Mapping[str, Any]) -> None:
        for attr, value in patch.items():
            if not hasattr(self.model, attr):
                raise ValueError(f"{self.schema.label} has no attribute {attr!r}")
            setattr(entity, attr, value)

    async def check_restore(
        self, db: AsyncSession, entity, snapshot: Mapping[str, Any]
    ) -> None:
        """
        Hook run before a snapshot is restored. Entity types with constraints
        across rows (unique numbers, references) override it and raise an
        HTTP error instead of letting the commit fail.
        """

    def restore_fields(self, entity, snapshot: Mapping[str, Any]) -> list[str]:
        """
        Overwrite tracked fields from a snapshot. Returns the restored keys.

        Keys no longer tracked are ignored; tracked fields missing from an
        older snapshot keep their current value.
        """
        unknown = [key for key in snapshot if self.schema.field_by_key(key) is None]
        if unknown:
            logger.warning(
                "Ignoring untracked snapshot keys for %s %s: %s",
                self.entity_type,
                entity.id,
                unknown,
            )
        restored = []
        for tracked in self.schema.fields:
            if tracked.key not in snapshot:
                logger.warning(
                    "Snapshot of %s %s lacks field %s, keeping current value",
                    self.entity_type,
                    entity.id,
                    tracked.key,
                )
                continue
            setattr(entity, tracked.attr, tracked.deserialize(snapshot[tracked.key]))
            restored.append(tracked.key)
        return restored

    async def create(self, db: AsyncSession, data: Mapping[str, Any]):
        """Insert a new entity. Creation does not produce a history entry."""
        entity = self.model(**data)
        try:
            db.add(entity)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error(
                "DB error creating %s: %s", self.entity_type, exc, exc_info=True
            )
            raise
        logger.info("%s created: id=%s", self.schema.label, entity.id)
        return await self.get_or_404(db, entity.id)

    async def update(
        self,
        db: AsyncSession,
        entity_id: uuid.UUID,
        patch: Mapping[str, Any],
        acting_user_id: Optional[uuid.UUID],
    ):
        """
        Versioned update: lock the row, record the pre-update snapshot when an
        acting user is known, apply the patch and commit, all in one transaction.
        """
        try:
            entity = await self.load_current(db, entity_id, for_update=True)
            if entity is None:
                raise self.not_found(entity_id)

            entry = await record_before_update(
                db,
                self.schema,
                entity_id,
                current_state=self.snapshot_of(entity),
                patch=patch,
                acting_user_id=acting_user_id,
            )
            self.apply_patch(entity, patch)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error(
                "DB error updating %s %s: %s",
                self.entity_type,
                entity_id,
                exc,
                exc_info=True,
            )
            raise
        except Exception:
            await db.rollback()
            raise

        if entry is not None:
            audit_logger.info(
                "%s updated: id=%s fields=%s by user=%s history=%s",
                self.schema.label,
                entity_id,
                ",".join(entry.changed_fields),
                acting_user_id,
                entry.id,
            )
        else:
            logger.info(
                "%s updated without history: id=%s", self.schema.label, entity_id
            )
        return await self.get_or_404(db, entity_id)

    async def delete(
        self, db: AsyncSession, entity_id: uuid.UUID, acting_user_id: Optional[uuid.UUID]
    ) -> int:
        """Delete the entity together with its history. Returns removed entries."""
        try:
            entity = await self.load_current(db, entity_id, for_update=True)
            if entity is None:
                raise self.not_found(entity_id)
            removed = await delete_entries(db, self.entity_type, entity_id)
            await db.delete(entity)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error(
                "DB error deleting %s %s: %s",
                self.entity_type,
                entity_id,
                exc,
                exc_info=True,
            )
            raise
        except Exception:
            await db.rollback()
            raise

        audit_logger.info(
            "%s deleted: id=%s history_entries=%d by user=%s",
            self.schema.label,
            entity_id,
            removed,
            acting_user_id,
        )
        return removed
