# app/api/offices.py

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.history import build_history_router
from app.db.session import get_db
from app.models.enums import ADMIN_ROLES
from app.models.user import User
from app.schemas.office import OfficeCreate, OfficeRead, OfficeUpdate
from app.services.office_service import (
    create_office,
    delete_office,
    get_office,
    list_offices,
    office_repo,
    update_office,
)
from app.utils.deps import get_current_user, require_roles

router = APIRouter(prefix="/api/offices", tags=["offices"])
logger = logging.getLogger(__name__)

admin_only = require_roles(*ADMIN_ROLES)


@router.post("", response_model=OfficeRead, status_code=status.HTTP_201_CREATED)
async def create(
    data: OfficeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    office = await create_office(db, data.model_dump())
    logger.info("Office %s created by user=%s", office.id, current_user.id)
    return OfficeRead.model_validate(office)


@router.get("", response_model=List[OfficeRead])
async def list_all(
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Offices ordered by sort order, then name. Inactive offices only on request.
    """
    offices = await list_offices(db, include_inactive=include_inactive)
    return [OfficeRead.model_validate(o) for o in offices]


@router.get("/{office_id}", response_model=OfficeRead)
async def get_one(
    office_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    office = await get_office(db, office_id)
    return OfficeRead.model_validate(office)


@router.patch("/{office_id}", response_model=OfficeRead)
async def update_one(
    office_id: uuid.UUID,
    data: OfficeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    office = await update_office(db, office_id, data.to_patch(), current_user.id)
    return OfficeRead.model_validate(office)


@router.delete("/{office_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_one(
    office_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    """
    Delete an office. Offices still used by contracts are deactivated instead.
    """
    deleted = await delete_office(db, office_id, current_user.id)
    logger.info(
        "Office %s %s by user=%s",
        office_id,
        "deleted" if deleted else "deactivated",
        current_user.id,
    )


history_router = build_history_router(
    office_repo,
    OfficeRead,
    prefix="/api/offices",
    tag="offices",
    rollback_guard=admin_only,
)
