"""
Balance chain integrity checks.

For one (account, token), consecutive records must link up: each record's
balance_before equals the previous record's balance_after. A mismatch means
changes are missing from the ledger. Gaps are reported, never patched.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List

import structlog

from balance_history.services.records import BalanceChangeRecord, format_decimal
from balance_history.services.snapshots import group_by_token, order_records

logger = structlog.get_logger()


@dataclass(frozen=True)
class BalanceGap:
    """Two consecutive records whose balances do not link up."""
    account_id: str
    token_id: str
    start_block: int
    end_block: int
    actual_balance_after: Decimal
    expected_balance_before: Decimal

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "token_id": self.token_id,
            "start_block": self.start_block,
            "end_block": self.end_block,
            "actual_balance_after": format_decimal(self.actual_balance_after),
            "expected_balance_before": format_decimal(self.expected_balance_before),
        }


def find_gaps(records: Iterable[BalanceChangeRecord]) -> List[BalanceGap]:
    """Find chain breaks in the records of a single (account, token)."""
    gaps = []
    previous = None
    for record in order_records(records):
        if previous is not None and record.balance_before != previous.balance_after:
            gaps.append(BalanceGap(
                account_id=record.account_id,
                token_id=record.token_id,
                start_block=previous.block_height,
                end_block=record.block_height,
                actual_balance_after=previous.balance_after,
                expected_balance_before=record.balance_before,
            ))
        previous = record
    return gaps


def find_gaps_by_token(records: Iterable[BalanceChangeRecord]) -> Dict[str, List[BalanceGap]]:
    """Run find_gaps per token; tokens without gaps are omitted."""
    result = {}
    for token_id, token_records in group_by_token(records).items():
        gaps = find_gaps(token_records)
        if gaps:
            result[token_id] = gaps
    return result


def log_gaps(account_id: str, gaps_by_token: Dict[str, List[BalanceGap]]) -> None:
    for token_id, gaps in gaps_by_token.items():
        for gap in gaps:
            logger.warning(
                "Balance chain gap detected",
                account_id=account_id,
                token_id=token_id,
                start_block=gap.start_block,
                end_block=gap.end_block,
                actual_balance_after=format_decimal(gap.actual_balance_after),
                expected_balance_before=format_decimal(gap.expected_balance_before),
            )
