# app/api/history.py

import logging
from typing import Callable, List, Type
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.user import User
from app.schemas.history import HistoryDiff, HistoryRead
from app.services.history_service import diff_with_current, get_history, get_history_entry
from app.utils.deps import get_current_user
from app.versioning import VersionedRepository, rollback_entity

logger = logging.getLogger(__name__)


def build_history_router(
    repo: VersionedRepository,
    read_schema: Type[BaseModel],
    *,
    prefix: str,
    tag: str,
    rollback_guard: Callable = get_current_user,
) -> APIRouter:
    """
    History endpoints of one versioned collection:
    list, single entry, diff against current state and rollback.

    ``rollback_guard`` is the dependency that authorizes a rollback, e.g.
    ``require_roles(...)`` for admin-only collections.
    """
    router = APIRouter(prefix=prefix, tags=[tag])
    label = repo.schema.label.lower()

    @router.get("/{entity_id}/history", response_model=List[HistoryRead])
    async def list_history(
        entity_id: UUID,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """History of the entity, newest first."""
        entries = await get_history(db, repo, entity_id)
        logger.info(
            "User %s fetched history of %s %s (%d entries)",
            current_user.id,
            label,
            entity_id,
            len(entries),
        )
        return entries

    @router.get("/{entity_id}/history/{history_id}", response_model=HistoryRead)
    async def get_history_item(
        entity_id: UUID,
        history_id: UUID,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        return await get_history_entry(db, repo, entity_id, history_id)

    @router.get("/{entity_id}/history/{history_id}/diff", response_model=HistoryDiff)
    async def diff_history_item(
        entity_id: UUID,
        history_id: UUID,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """What a rollback to this entry would change: {field: [current, snapshot]}."""
        diff = await diff_with_current(db, repo, entity_id, history_id)
        return HistoryDiff(history_id=history_id, diff=diff)

    @router.post("/{entity_id}/rollback/{history_id}", response_model=read_schema)
    async def rollback(
        entity_id: UUID,
        history_id: UUID,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(rollback_guard),
    ):
        """Restore the entity to the snapshot of a history entry."""
        entity = await rollback_entity(db, repo, entity_id, history_id, current_user.id)
        logger.info(
            "User %s rolled back %s %s to history entry %s",
            current_user.id,
            label,
            entity_id,
            history_id,
        )
        return read_schema.model_validate(entity)

    return router
