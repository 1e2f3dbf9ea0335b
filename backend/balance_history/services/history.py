"""
Balance history service.

This service provides:
1. Chart series: balances sampled at regular instants, grouped by token
2. CSV export of raw balance changes for a date range
3. Balance chain gap reports

All validation happens before the ledger is touched, and each request loads
its records exactly once.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

import structlog

from balance_history.config import Settings, get_settings
from balance_history.exceptions import InvalidRangeError
from balance_history.services.export import (
    export_bounds,
    export_filename,
    format_export_row,
    parse_export_date,
    render_csv,
    select_export_records,
)
from balance_history.services.gap_detector import BalanceGap, find_gaps, find_gaps_by_token, log_gaps
from balance_history.services.intervals import Interval, generate_sample_instants, parse_interval
from balance_history.services.ledger_store import LedgerRecordStore
from balance_history.services.records import BalanceChangeRecord, as_naive_utc
from balance_history.services.snapshots import TokenSeries, resolve_series_concurrently

logger = structlog.get_logger()


@dataclass(frozen=True)
class ChartQuery:
    account_id: str
    start_time: datetime
    end_time: datetime
    interval: Interval
    token_ids: Optional[List[str]] = None


@dataclass(frozen=True)
class ExportQuery:
    account_id: str
    start_date: date
    end_date: date
    token_ids: Optional[List[str]] = None


def parse_token_ids(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated token list; empty input means "all tokens"."""
    if not value:
        return None
    token_ids = [t.strip() for t in value.split(",") if t.strip()]
    return token_ids or None


CHART_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def parse_chart_time(value: str, name: str) -> datetime:
    """Parse YYYY-MM-DDTHH:mm:ss as UTC. A trailing UTC offset is honoured."""
    try:
        if len(value) < 19:
            raise ValueError(value)
        parsed = datetime.strptime(value[:19], CHART_TIME_FORMAT)
        if value[19:]:
            # Only an offset such as +02:00 may follow the seconds
            parsed = datetime.fromisoformat(value)
            if value[19] not in "+-" or parsed.tzinfo is None:
                raise ValueError(value)
        return as_naive_utc(parsed)
    except (TypeError, ValueError):
        raise InvalidRangeError(f"Invalid {name} '{value}', expected YYYY-MM-DDTHH:mm:ss")


def parse_chart_query(
    account_id: str,
    start_time: str,
    end_time: str,
    interval: str,
    token_ids: Optional[str] = None,
) -> ChartQuery:
    query = ChartQuery(
        account_id=account_id,
        start_time=parse_chart_time(start_time, "start_time"),
        end_time=parse_chart_time(end_time, "end_time"),
        interval=parse_interval(interval),
        token_ids=parse_token_ids(token_ids),
    )
    if query.start_time > query.end_time:
        raise InvalidRangeError(f"start_time {start_time} is after end_time {end_time}")
    return query


def parse_export_query(
    account_id: str,
    start_time: str,
    end_time: str,
    token_ids: Optional[str] = None,
) -> ExportQuery:
    query = ExportQuery(
        account_id=account_id,
        start_date=parse_export_date(start_time, "start_time"),
        end_date=parse_export_date(end_time, "end_time"),
        token_ids=parse_token_ids(token_ids),
    )
    export_bounds(query.start_date, query.end_date)
    return query


class BalanceHistoryService:
    """Chart and export operations over a ledger record store."""

    def __init__(self, store: LedgerRecordStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    async def get_chart(self, query: ChartQuery) -> TokenSeries:
        """
        Balance series per token, one snapshot per sample instant.

        Every record up to end_time is loaded so that balances set before
        start_time carry into the first instants.
        """
        instants = generate_sample_instants(
            query.start_time,
            query.end_time,
            query.interval,
            max_points=self.settings.max_chart_points,
        )

        records = await self.store.load_records(
            query.account_id,
            until=query.end_time,
            token_ids=query.token_ids,
        )

        series = await resolve_series_concurrently(records, instants, query.token_ids)

        # Detect only; the series is built from the records as stored
        log_gaps(query.account_id, find_gaps_by_token(records))

        logger.info(
            "Built balance chart",
            account_id=query.account_id,
            interval=query.interval.value,
            token_count=len(series),
            point_count=len(instants),
            record_count=len(records),
        )
        return series

    async def export_csv(self, query: ExportQuery) -> Tuple[str, str]:
        """Filename and CSV body for the raw changes in [start_date, end_date)."""
        start, end = export_bounds(query.start_date, query.end_date)
        records = await self.store.load_range(query.account_id, start, end, query.token_ids)

        selected = select_export_records(records, query.start_date, query.end_date, query.token_ids)
        content = render_csv(format_export_row(r) for r in selected)

        logger.info(
            "Exported balance changes",
            account_id=query.account_id,
            start_date=query.start_date.isoformat(),
            end_date=query.end_date.isoformat(),
            loaded_count=len(records),
            row_count=len(selected),
        )
        return export_filename(query.account_id, query.start_date, query.end_date), content

    async def list_changes(
        self,
        account_id: str,
        token_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[BalanceChangeRecord]:
        """A page of raw changes, newest first. Limit is capped by settings."""
        if limit is None:
            limit = self.settings.default_page_limit
        limit = min(limit, self.settings.max_page_limit)
        return await self.store.list_changes(account_id, token_id=token_id, limit=limit, offset=offset)

    async def find_gaps(self, account_id: str, token_id: Optional[str] = None) -> Dict[str, List[BalanceGap]]:
        """Chain breaks per token for an account, optionally for one token."""
        records = await self.store.load_records(account_id, token_ids=[token_id] if token_id else None)
        if token_id:
            gaps = find_gaps(records)
            return {token_id: gaps} if gaps else {}
        return find_gaps_by_token(records)
