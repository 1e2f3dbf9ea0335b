"""
Point-in-time balance resolution.

Given the change records of one (account, token), the balance in effect at
an instant is the balance_after of the latest record whose event_time is at
or before that instant, or zero when there is none. Records sharing an
event_time are applied in block_height order.
"""
import asyncio
from bisect import bisect_right
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

import structlog

from balance_history.services.records import BalanceChangeRecord, Snapshot, ZERO

logger = structlog.get_logger()

TokenSeries = Dict[str, List[Snapshot]]


def order_records(records: Iterable[BalanceChangeRecord]) -> List[BalanceChangeRecord]:
    """Sort records by (event_time, block_height)."""
    return sorted(records, key=lambda r: r.sort_key)


def resolve_snapshots(
    records: Sequence[BalanceChangeRecord],
    instants: Sequence[datetime],
    opening_balance: Decimal = ZERO,
) -> List[Snapshot]:
    """
    Resolve one balance per instant with a single forward merge.

    Args:
        records: Change records of a single token
        instants: Non-decreasing sample instants
        opening_balance: Balance in effect before the first record

    Returns:
        One Snapshot per instant, in the order of ``instants``
    """
    ordered = order_records(records)
    snapshots = []
    cursor = 0
    balance = opening_balance
    previous = None

    for instant in instants:
        if previous is not None and instant < previous:
            raise ValueError("Sample instants must be non-decreasing")
        previous = instant

        while cursor < len(ordered) and ordered[cursor].event_time <= instant:
            balance = ordered[cursor].balance_after
            cursor += 1
        snapshots.append(Snapshot(timestamp=instant, balance=balance))

    return snapshots


def balance_at(
    records: Sequence[BalanceChangeRecord],
    instant: datetime,
    opening_balance: Decimal = ZERO,
) -> Decimal:
    """Balance at a single instant via a "largest event_time <= instant" lookup."""
    ordered = order_records(records)
    times = [r.event_time for r in ordered]
    position = bisect_right(times, instant)
    if position == 0:
        return opening_balance
    return ordered[position - 1].balance_after


def group_by_token(records: Iterable[BalanceChangeRecord]) -> Dict[str, List[BalanceChangeRecord]]:
    grouped = defaultdict(list)
    for record in records:
        grouped[record.token_id].append(record)
    return dict(grouped)


def series_token_ids(
    grouped: Dict[str, List[BalanceChangeRecord]],
    token_ids: Optional[Sequence[str]] = None,
) -> List[str]:
    """Tokens to chart: the explicit list when given, else every token seen."""
    if token_ids:
        # Keep request order, drop duplicates
        return list(dict.fromkeys(token_ids))
    return sorted(grouped)


def assemble_series(
    records: Iterable[BalanceChangeRecord],
    instants: Sequence[datetime],
    token_ids: Optional[Sequence[str]] = None,
) -> TokenSeries:
    """
    Resolve every requested token and group the snapshots by token_id.

    Tokens with no records still get a series (all zero), so a chart has a
    line for every requested token.
    """
    grouped = group_by_token(records)
    return {
        token_id: resolve_snapshots(grouped.get(token_id, []), instants)
        for token_id in series_token_ids(grouped, token_ids)
    }


async def resolve_series_concurrently(
    records: Iterable[BalanceChangeRecord],
    instants: Sequence[datetime],
    token_ids: Optional[Sequence[str]] = None,
) -> TokenSeries:
    """
    Same result as assemble_series, with each token resolved as its own task.

    Tokens share no state, so each merge runs in a worker thread and the
    results are joined before the response is built.
    """
    grouped = group_by_token(records)
    tokens = series_token_ids(grouped, token_ids)

    results = await asyncio.gather(*(
        asyncio.to_thread(resolve_snapshots, grouped.get(token_id, []), instants)
        for token_id in tokens
    ))

    logger.debug("Resolved token series", token_count=len(tokens), point_count=len(instants))
    return dict(zip(tokens, results))


def serialize_series(series: TokenSeries) -> Dict[str, List[dict]]:
    """Render series into the chart response shape."""
    return {
        token_id: [snapshot.to_dict() for snapshot in snapshots]
        for token_id, snapshots in series.items()
    }
