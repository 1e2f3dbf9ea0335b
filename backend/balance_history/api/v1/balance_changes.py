"""Raw balance change listing and chain gap reports"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from balance_history.api.v1.dependencies import get_history_service, to_http_error
from balance_history.exceptions import BalanceHistoryError
from balance_history.schemas.balance_history import BalanceChangeResponse, BalanceGapResponse
from balance_history.services.history import BalanceHistoryService

router = APIRouter()


@router.get("", response_model=List[BalanceChangeResponse])
async def list_balance_changes(
    account_id: str = Query(...),
    token_id: Optional[str] = Query(None, description="Filter by token"),
    limit: Optional[int] = Query(None, ge=1, description="Page size, capped at 1000"),
    offset: int = Query(0, ge=0),
    service: BalanceHistoryService = Depends(get_history_service),
):
    """List balance changes for an account, newest block first"""
    try:
        records = await service.list_changes(account_id, token_id=token_id, limit=limit, offset=offset)
    except BalanceHistoryError as e:
        raise to_http_error(e)

    return [BalanceChangeResponse.from_record(r) for r in records]


@router.get("/gaps", response_model=List[BalanceGapResponse])
async def list_balance_gaps(
    account_id: str = Query(...),
    token_id: Optional[str] = Query(None, description="Only check this token"),
    service: BalanceHistoryService = Depends(get_history_service),
):
    """
    Report places where a record's balance_before does not match the
    previous record's balance_after. Nothing is repaired.
    """
    try:
        gaps_by_token = await service.find_gaps(account_id, token_id)
    except BalanceHistoryError as e:
        raise to_http_error(e)

    return [
        BalanceGapResponse(**gap.to_dict())
        for token in sorted(gaps_by_token)
        for gap in gaps_by_token[token]
    ]
