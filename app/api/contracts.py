# app/api/contracts.py

import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.history import build_history_router
from app.db.session import get_db
from app.models.enums import ContractStatus
from app.models.user import User
from app.schemas.common import Page
from app.schemas.contract import ContractCreate, ContractRead, ContractUpdate
from app.services.contract_service import (
    contract_repo,
    create_contract,
    delete_contract,
    get_contract,
    list_contracts,
    update_contract,
)
from app.utils.deps import get_current_user
from app.utils.pagination import MAX_PAGE_SIZE, page_payload

router = APIRouter(prefix="/api/contracts", tags=["contracts"])
logger = logging.getLogger(__name__)


@router.post("", response_model=ContractRead, status_code=status.HTTP_201_CREATED)
async def create(
    data: ContractCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a contract. The contract number must be unique (409 otherwise).
    """
    contract = await create_contract(db, data.model_dump())
    logger.info(
        "Contract %s (%s) created by user=%s",
        contract.id,
        contract.contract_number,
        current_user.id,
    )
    return ContractRead.model_validate(contract)


@router.get("", response_model=Page[ContractRead])
async def list_all(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    status_filter: Optional[ContractStatus] = Query(None, alias="status"),
    manager_id: Optional[uuid.UUID] = Query(None, alias="managerId"),
    office_id: Optional[uuid.UUID] = Query(None, alias="officeId"),
    search: Optional[str] = Query(None, max_length=100),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items, total = await list_contracts(
        db,
        page=page,
        limit=limit,
        status=status_filter,
        manager_id=manager_id,
        office_id=office_id,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    data = [ContractRead.model_validate(c) for c in items]
    return Page[ContractRead](**page_payload(data, total, page, limit))


@router.get("/{contract_id}", response_model=ContractRead)
async def get_one(
    contract_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contract = await get_contract(db, contract_id)
    return ContractRead.model_validate(contract)


@router.patch("/{contract_id}", response_model=ContractRead)
async def update_one(
    contract_id: uuid.UUID,
    data: ContractUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contract = await update_contract(db, contract_id, data.to_patch(), current_user.id)
    return ContractRead.model_validate(contract)


@router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_one(
    contract_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await delete_contract(db, contract_id, current_user.id)


history_router = build_history_router(
    contract_repo, ContractRead, prefix="/api/contracts", tag="contracts"
)
