"""Monitored accounts API endpoints"""
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from balance_history.config import get_settings
from balance_history.models.database import get_db
from balance_history.models.monitored_account import MonitoredAccount
from balance_history.schemas.monitored_account import (
    MonitoredAccountCreate,
    MonitoredAccountUpdate,
    MonitoredAccountResponse,
)

router = APIRouter()
logger = structlog.get_logger()


@router.post("", response_model=MonitoredAccountResponse)
async def add_monitored_account(
    request: MonitoredAccountCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Add an account to monitoring, or update its enabled flag if present.

    Only DAO treasury accounts are accepted.
    """
    suffix = get_settings().monitored_account_suffix
    if not request.account_id.endswith(suffix):
        raise HTTPException(
            status_code=400,
            detail=f"Only sputnik-dao accounts can be monitored. Account ID must end with '{suffix}'"
        )

    account = await db.get(MonitoredAccount, request.account_id)
    if account is None:
        account = MonitoredAccount(account_id=request.account_id, enabled=request.enabled)
        db.add(account)
    else:
        account.enabled = request.enabled
        account.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(account)

    logger.info("Monitored account saved", account_id=account.account_id, enabled=account.enabled)
    return account


@router.get("", response_model=List[MonitoredAccountResponse])
async def list_monitored_accounts(
    enabled: Optional[bool] = Query(None, description="Filter by enabled flag"),
    db: AsyncSession = Depends(get_db),
):
    """List monitored accounts ordered by account id"""
    query = select(MonitoredAccount)
    if enabled is not None:
        query = query.where(MonitoredAccount.enabled == enabled)
    query = query.order_by(MonitoredAccount.account_id)

    result = await db.execute(query)
    return result.scalars().all()


@router.patch("/{account_id}", response_model=MonitoredAccountResponse)
async def update_monitored_account(
    request: MonitoredAccountUpdate,
    account_id: str = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Enable or disable a monitored account"""
    account = await db.get(MonitoredAccount, account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    account.enabled = request.enabled
    account.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(account)

    return account


@router.delete("/{account_id}", status_code=204)
async def delete_monitored_account(
    account_id: str = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Stop monitoring an account"""
    account = await db.get(MonitoredAccount, account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    await db.delete(account)
    await db.commit()

    logger.info("Monitored account removed", account_id=account_id)
    return Response(status_code=204)
