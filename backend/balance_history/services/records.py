"""In-memory ledger values shared by the resolution and export services."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Tuple

ZERO = Decimal(0)


@dataclass(frozen=True)
class BalanceChangeRecord:
    """One immutable ledger entry for one (account, token)."""
    account_id: str
    token_id: str
    block_height: int
    event_time: datetime  # naive UTC
    counterparty: str
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    transaction_hashes: Tuple[str, ...] = field(default_factory=tuple)
    receipt_id: str = ""
    token_symbol: Optional[str] = None

    @property
    def sort_key(self) -> Tuple[datetime, int]:
        return (self.event_time, self.block_height)


@dataclass(frozen=True)
class Snapshot:
    """Balance in effect at a sample instant."""
    timestamp: datetime
    balance: Decimal

    def to_dict(self) -> dict:
        return {
            "timestamp": to_utc_iso(self.timestamp),
            "balance": format_decimal(self.balance),
        }


def to_utc_iso(value: datetime) -> str:
    """ISO-8601 with an explicit UTC offset, e.g. 2025-01-01T00:00:00+00:00."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


def as_naive_utc(value: datetime) -> datetime:
    """Drop tzinfo after converting aware datetimes to UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def block_timestamp_to_datetime(timestamp_nanos: int) -> datetime:
    """NEAR block timestamp (nanoseconds since epoch) as a naive UTC datetime."""
    seconds, nanos = divmod(timestamp_nanos, 1_000_000_000)
    value = datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=nanos // 1000)


def format_decimal(value: Decimal) -> str:
    """Plain decimal string without exponent notation.

    Trailing zeros are dropped, so a NUMERIC read back as 100.000 renders
    as "100".
    """
    if value == 0:
        return "0"
    return format(value.normalize(), "f")
