"""Shared API dependencies"""
from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from balance_history.config import get_settings
from balance_history.exceptions import (
    BalanceHistoryError,
    InvalidIntervalError,
    InvalidRangeError,
    LedgerUnavailableError,
)
from balance_history.models.database import get_db
from balance_history.services.history import BalanceHistoryService
from balance_history.services.ledger_store import LedgerRecordStore, SqlLedgerRecordStore


async def get_ledger_store(db: AsyncSession = Depends(get_db)) -> LedgerRecordStore:
    """Dependency providing the ledger record store for a request"""
    return SqlLedgerRecordStore(db)


async def get_history_service(
    store: LedgerRecordStore = Depends(get_ledger_store),
) -> BalanceHistoryService:
    """Dependency providing a BalanceHistoryService"""
    return BalanceHistoryService(store, get_settings())


def to_http_error(error: BalanceHistoryError) -> HTTPException:
    """Map a domain error onto an HTTP error response"""
    if isinstance(error, (InvalidRangeError, InvalidIntervalError)):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, LedgerUnavailableError):
        return HTTPException(status_code=503, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
