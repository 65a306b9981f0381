# app/api/measurements.py

import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.history import build_history_router
from app.db.session import get_db
from app.models.enums import MeasurementStatus
from app.models.user import User
from app.schemas.common import Page
from app.schemas.measurement import MeasurementCreate, MeasurementRead, MeasurementUpdate
from app.services.measurement_service import (
    create_measurement,
    delete_measurement,
    get_measurement,
    list_measurements,
    measurement_repo,
    update_measurement,
)
from app.utils.deps import get_current_user
from app.utils.pagination import MAX_PAGE_SIZE, page_payload

router = APIRouter(prefix="/api/measurements", tags=["measurements"])
logger = logging.getLogger(__name__)


@router.post("", response_model=MeasurementRead, status_code=status.HTTP_201_CREATED)
async def create(
    data: MeasurementCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Register a new measurement request. Creation writes no history entry.
    """
    measurement = await create_measurement(db, data.model_dump())
    logger.info("Measurement %s created by user=%s", measurement.id, current_user.id)
    return MeasurementRead.model_validate(measurement)


@router.get("", response_model=Page[MeasurementRead])
async def list_all(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    status_filter: Optional[MeasurementStatus] = Query(None, alias="status"),
    manager_id: Optional[uuid.UUID] = Query(None, alias="managerId"),
    surveyor_id: Optional[uuid.UUID] = Query(None, alias="surveyorId"),
    search: Optional[str] = Query(None, max_length=100),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items, total = await list_measurements(
        db,
        page=page,
        limit=limit,
        status=status_filter,
        manager_id=manager_id,
        surveyor_id=surveyor_id,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    data = [MeasurementRead.model_validate(m) for m in items]
    return Page[MeasurementRead](**page_payload(data, total, page, limit))


@router.get("/{measurement_id}", response_model=MeasurementRead)
async def get_one(
    measurement_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    measurement = await get_measurement(db, measurement_id)
    return MeasurementRead.model_validate(measurement)


@router.patch("/{measurement_id}", response_model=MeasurementRead)
async def update_one(
    measurement_id: uuid.UUID,
    data: MeasurementUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Partial update. The state before the change is kept in the history.
    """
    measurement = await update_measurement(
        db, measurement_id, data.to_patch(), current_user.id
    )
    return MeasurementRead.model_validate(measurement)


@router.delete("/{measurement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_one(
    measurement_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Delete a measurement together with its history.
    """
    await delete_measurement(db, measurement_id, current_user.id)


history_router = build_history_router(
    measurement_repo, MeasurementRead, prefix="/api/measurements", tag="measurements"
)
