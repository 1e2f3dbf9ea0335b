"""
Ledger record loading.

The history service asks the store once per request for every record it
needs; nothing is fetched lazily afterwards. SqlLedgerRecordStore reads the
balance_changes table, InMemoryLedgerRecordStore serves a fixed list.
"""
import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Sequence

import structlog
from sqlalchemy import select, and_
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from balance_history.exceptions import LedgerUnavailableError
from balance_history.models.balance_change import BalanceChange, Counterparty
from balance_history.services.records import BalanceChangeRecord, as_naive_utc

logger = structlog.get_logger()

_STORE_ERRORS = (DBAPIError, OSError, asyncio.TimeoutError)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def row_to_record(change: BalanceChange, token_symbol: Optional[str] = None) -> BalanceChangeRecord:
    """Convert a balance_changes row into an immutable record."""
    receipts = change.receipt_id or []
    return BalanceChangeRecord(
        account_id=change.account_id,
        token_id=change.token_id,
        block_height=change.block_height,
        event_time=as_naive_utc(change.block_time),
        counterparty=change.counterparty,
        amount=_to_decimal(change.amount),
        balance_before=_to_decimal(change.balance_before),
        balance_after=_to_decimal(change.balance_after),
        transaction_hashes=tuple(change.transaction_hashes or ()),
        receipt_id=receipts[0] if receipts else "",
        token_symbol=token_symbol,
    )


class LedgerRecordStore:
    """Read-only access to an account's balance change records."""

    async def load_records(
        self,
        account_id: str,
        until: Optional[datetime] = None,
        token_ids: Optional[Sequence[str]] = None,
    ) -> List[BalanceChangeRecord]:
        """All records with event_time <= until, ordered by (event_time, block_height)."""
        raise NotImplementedError

    async def load_range(
        self,
        account_id: str,
        start: datetime,
        end: datetime,
        token_ids: Optional[Sequence[str]] = None,
    ) -> List[BalanceChangeRecord]:
        """Records with start <= event_time < end, ordered by (token_id, block_height)."""
        raise NotImplementedError

    async def list_changes(
        self,
        account_id: str,
        token_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[BalanceChangeRecord]:
        """A page of records, newest block first."""
        raise NotImplementedError


class SqlLedgerRecordStore(LedgerRecordStore):
    """Ledger store backed by the balance_changes table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_query(self, account_id: str, token_ids: Optional[Sequence[str]]):
        query = (
            select(BalanceChange, Counterparty.token_symbol)
            .outerjoin(Counterparty, Counterparty.account_id == BalanceChange.token_id)
            .where(BalanceChange.account_id == account_id)
        )
        if token_ids:
            query = query.where(BalanceChange.token_id.in_(list(token_ids)))
        return query

    async def _fetch(self, query, **log_context) -> List[BalanceChangeRecord]:
        try:
            result = await self.db.execute(query)
            rows = result.all()
        except _STORE_ERRORS as e:
            logger.error("Ledger query failed", error=str(e), **log_context)
            raise LedgerUnavailableError("Ledger store unavailable") from e

        records = [row_to_record(change, symbol) for change, symbol in rows]
        logger.info("Loaded ledger records", record_count=len(records), **log_context)
        return records

    async def load_records(self, account_id, until=None, token_ids=None):
        query = self._base_query(account_id, token_ids)
        if until is not None:
            query = query.where(BalanceChange.block_time <= until)
        query = query.order_by(BalanceChange.block_time, BalanceChange.block_height)
        return await self._fetch(query, account_id=account_id, until=str(until))

    async def load_range(self, account_id, start, end, token_ids=None):
        query = (
            self._base_query(account_id, token_ids)
            .where(
                and_(
                    BalanceChange.block_time >= start,
                    BalanceChange.block_time < end,
                )
            )
            .order_by(BalanceChange.token_id, BalanceChange.block_height)
        )
        return await self._fetch(query, account_id=account_id, start=str(start), end=str(end))

    async def list_changes(self, account_id, token_id=None, limit=100, offset=0):
        query = self._base_query(account_id, [token_id] if token_id else None)
        query = (
            query.order_by(BalanceChange.block_height.desc(), BalanceChange.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return await self._fetch(query, account_id=account_id, token_id=token_id)


class InMemoryLedgerRecordStore(LedgerRecordStore):
    """Ledger store over a fixed list of records."""

    def __init__(self, records: Sequence[BalanceChangeRecord] = ()):
        self.records = list(records)

    def _matching(self, account_id: str, token_ids: Optional[Sequence[str]]) -> List[BalanceChangeRecord]:
        wanted = set(token_ids) if token_ids else None
        return [
            r for r in self.records
            if r.account_id == account_id and (wanted is None or r.token_id in wanted)
        ]

    async def load_records(self, account_id, until=None, token_ids=None):
        records = [
            r for r in self._matching(account_id, token_ids)
            if until is None or r.event_time <= until
        ]
        return sorted(records, key=lambda r: r.sort_key)

    async def load_range(self, account_id, start, end, token_ids=None):
        records = [
            r for r in self._matching(account_id, token_ids)
            if start <= r.event_time < end
        ]
        return sorted(records, key=lambda r: (r.token_id, r.block_height))

    async def list_changes(self, account_id, token_id=None, limit=100, offset=0):
        records = sorted(
            self._matching(account_id, [token_id] if token_id else None),
            key=lambda r: r.block_height,
            reverse=True,
        )
        return records[offset:offset + limit]
