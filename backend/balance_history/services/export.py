"""Balance change export: record selection, row formatting and CSV rendering."""
import csv
import io
from dataclasses import dataclass, astuple, fields
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Sequence

from balance_history.exceptions import InvalidRangeError
from balance_history.models.balance_change import SNAPSHOT_COUNTERPARTY, NOT_REGISTERED_COUNTERPARTY
from balance_history.services.records import BalanceChangeRecord, format_decimal

# Ledger bookkeeping entries, not transfers
EXCLUDED_COUNTERPARTIES = frozenset({SNAPSHOT_COUNTERPARTY, NOT_REGISTERED_COUNTERPARTY})

BLOCK_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class ExportRow:
    """One CSV row. Field order is the column order."""
    block_height: int
    block_time: str
    token_id: str
    token_symbol: str
    counterparty: str
    amount: str
    balance_before: str
    balance_after: str
    transaction_hashes: str
    receipt_id: str


EXPORT_COLUMNS = [f.name for f in fields(ExportRow)]


def parse_export_date(value: str, name: str) -> date:
    """Parse a YYYY-MM-DD query value."""
    try:
        if len(value) != 10:
            raise ValueError(value)
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise InvalidRangeError(f"Invalid {name} '{value}', expected YYYY-MM-DD")


def export_bounds(start_date: date, end_date: date) -> tuple:
    """Datetime bounds of the half-open date range [start_date, end_date)."""
    if start_date > end_date:
        raise InvalidRangeError(
            f"start_time {start_date.isoformat()} is after end_time {end_date.isoformat()}"
        )
    return datetime.combine(start_date, time.min), datetime.combine(end_date, time.min)


def is_exportable(record: BalanceChangeRecord) -> bool:
    return record.counterparty not in EXCLUDED_COUNTERPARTIES


def select_export_records(
    records: Iterable[BalanceChangeRecord],
    start_date: date,
    end_date: date,
    token_ids: Optional[Sequence[str]] = None,
) -> List[BalanceChangeRecord]:
    """
    Pick the records that belong in an export.

    Keeps records with start_date <= event_time < end_date, restricted to
    token_ids when given, minus SNAPSHOT and NOT_REGISTERED entries. Rows are
    ordered by token, then block height.
    """
    start, end = export_bounds(start_date, end_date)
    wanted = set(token_ids) if token_ids else None

    selected = [
        r for r in records
        if start <= r.event_time < end
        and (wanted is None or r.token_id in wanted)
        and is_exportable(r)
    ]
    selected.sort(key=lambda r: (r.token_id, r.block_height))
    return selected


def format_export_row(record: BalanceChangeRecord) -> ExportRow:
    # Amounts keep their sign and full precision
    return ExportRow(
        block_height=record.block_height,
        block_time=record.event_time.strftime(BLOCK_TIME_FORMAT),
        token_id=record.token_id,
        token_symbol=record.token_symbol or "",
        counterparty=record.counterparty,
        amount=format_decimal(record.amount),
        balance_before=format_decimal(record.balance_before),
        balance_after=format_decimal(record.balance_after),
        transaction_hashes=",".join(record.transaction_hashes),
        receipt_id=record.receipt_id or "",
    )


def render_csv(rows: Iterable[ExportRow]) -> str:
    """Render rows with a header line; fields containing commas are quoted."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for row in rows:
        writer.writerow(astuple(row))
    return output.getvalue()


def export_filename(account_id: str, start_date: date, end_date: date) -> str:
    return f"balance_changes_{account_id}_{start_date.isoformat()}_to_{end_date.isoformat()}.csv"
