"""Balance history API endpoints: chart series and CSV export"""
import io
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from balance_history.api.v1.dependencies import get_history_service, to_http_error
from balance_history.exceptions import BalanceHistoryError
from balance_history.schemas.balance_history import BalanceSnapshotResponse
from balance_history.services.history import (
    BalanceHistoryService,
    parse_chart_query,
    parse_export_query,
)
from balance_history.services.snapshots import serialize_series

router = APIRouter()


@router.get("/chart", response_model=Dict[str, List[BalanceSnapshotResponse]])
async def get_balance_chart(
    account_id: str = Query(..., description="Account to chart"),
    start_time: str = Query(..., description="YYYY-MM-DDTHH:mm:ss, UTC"),
    end_time: str = Query(..., description="YYYY-MM-DDTHH:mm:ss, UTC (inclusive)"),
    interval: str = Query(..., description="hourly, daily, weekly or monthly"),
    token_ids: Optional[str] = Query(None, description="Comma-separated token ids (default: all)"),
    service: BalanceHistoryService = Depends(get_history_service),
):
    """
    Balance snapshots at regular intervals, grouped by token.

    Response format: {"token_id": [{"timestamp": "...", "balance": "..."}]}
    """
    try:
        query = parse_chart_query(account_id, start_time, end_time, interval, token_ids)
        series = await service.get_chart(query)
    except BalanceHistoryError as e:
        raise to_http_error(e)

    return serialize_series(series)


@router.get("/csv")
async def export_balance_csv(
    account_id: str = Query(..., description="Account to export"),
    start_time: str = Query(..., description="YYYY-MM-DD (inclusive)"),
    end_time: str = Query(..., description="YYYY-MM-DD (exclusive)"),
    token_ids: Optional[str] = Query(None, description="Comma-separated token ids (default: all)"),
    service: BalanceHistoryService = Depends(get_history_service),
):
    """
    Raw balance changes as a downloadable CSV.

    SNAPSHOT and NOT_REGISTERED entries are left out.
    """
    try:
        query = parse_export_query(account_id, start_time, end_time, token_ids)
        filename, content = await service.export_csv(query)
    except BalanceHistoryError as e:
        raise to_http_error(e)

    return StreamingResponse(
        io.BytesIO(content.encode("utf-8")),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )
