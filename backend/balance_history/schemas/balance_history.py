"""Balance history schemas"""
from pydantic import BaseModel
from typing import List, Optional

from balance_history.services.records import BalanceChangeRecord, format_decimal, to_utc_iso


class BalanceSnapshotResponse(BaseModel):
    timestamp: str  # ISO 8601, UTC
    balance: str  # decimal-adjusted


class BalanceChangeResponse(BaseModel):
    account_id: str
    block_height: int
    block_time: str
    token_id: str
    token_symbol: Optional[str] = None
    counterparty: str
    amount: str
    balance_before: str
    balance_after: str
    transaction_hashes: List[str]
    receipt_id: str

    @classmethod
    def from_record(cls, record: BalanceChangeRecord) -> "BalanceChangeResponse":
        return cls(
            account_id=record.account_id,
            block_height=record.block_height,
            block_time=to_utc_iso(record.event_time),
            token_id=record.token_id,
            token_symbol=record.token_symbol,
            counterparty=record.counterparty,
            amount=format_decimal(record.amount),
            balance_before=format_decimal(record.balance_before),
            balance_after=format_decimal(record.balance_after),
            transaction_hashes=list(record.transaction_hashes),
            receipt_id=record.receipt_id,
        )


class BalanceGapResponse(BaseModel):
    account_id: str
    token_id: str
    start_block: int
    end_block: int
    actual_balance_after: str
    expected_balance_before: str
