"""Pytest configuration and fixtures for Balance History backend tests"""
import os
import pytest
import pytest_asyncio
from datetime import datetime
from decimal import Decimal
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from dotenv import load_dotenv

from balance_history.main import app
from balance_history.models.database import Base, get_db
from balance_history.api.v1.dependencies import get_ledger_store
from balance_history.services.ledger_store import InMemoryLedgerRecordStore
from balance_history.services.records import BalanceChangeRecord

# Load environment variables
load_dotenv()

# Tests run against an in-memory SQLite database unless TEST_DATABASE_URL points
# at a dedicated database. Tables are created and dropped around every test.
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")

TEST_ACCOUNT = "webassemblymusic-treasury.sputnik-dao.near"


def _create_test_engine():
    if TEST_DATABASE_URL.startswith("sqlite"):
        # One shared connection so every session sees the same in-memory database
        return create_async_engine(
            TEST_DATABASE_URL,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a database session on freshly created tables for each test."""
    engine = _create_test_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client backed by the test database"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def memory_client(ledger_records) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client whose ledger is the ledger_records fixture"""
    store = InMemoryLedgerRecordStore(ledger_records)

    async def override_get_ledger_store():
        return store

    app.dependency_overrides[get_ledger_store] = override_get_ledger_store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_record():
    """Factory for BalanceChangeRecord with sensible defaults"""

    def _make(
        event_time,
        balance_after,
        token_id="near",
        block_height=None,
        balance_before=None,
        counterparty="alice.near",
        account_id=TEST_ACCOUNT,
        transaction_hashes=("tx1",),
        receipt_id="receipt1",
        token_symbol=None,
    ):
        if isinstance(event_time, str):
            event_time = datetime.fromisoformat(event_time)
        balance_after = Decimal(str(balance_after))
        balance_before = Decimal(str(balance_before)) if balance_before is not None else Decimal(0)
        if block_height is None:
            block_height = int(event_time.timestamp())
        return BalanceChangeRecord(
            account_id=account_id,
            token_id=token_id,
            block_height=block_height,
            event_time=event_time,
            counterparty=counterparty,
            amount=balance_after - balance_before,
            balance_before=balance_before,
            balance_after=balance_after,
            transaction_hashes=tuple(transaction_hashes),
            receipt_id=receipt_id,
            token_symbol=token_symbol,
        )

    return _make


@pytest.fixture
def ledger_records(make_record):
    """
    Small treasury ledger:
    - near: 100 on 2025-01-01, 150 on 2025-01-03, a SNAPSHOT on 2025-01-01 12:00
    - arizcredits.near: 3 on 2025-01-02, NOT_REGISTERED change on 2025-01-04
    """
    return [
        make_record("2025-01-01T00:00:00", 100, block_height=1000, balance_before=0,
                    transaction_hashes=("hashA", "hashB")),
        make_record("2025-01-01T12:00:00", 100, block_height=1050, balance_before=100,
                    counterparty="SNAPSHOT", transaction_hashes=(), receipt_id=""),
        make_record("2025-01-03T00:00:00", 150, block_height=1200, balance_before=100,
                    counterparty="bob.near"),
        make_record("2025-01-02T08:30:00", 3, token_id="arizcredits.near", block_height=1100,
                    balance_before=0, token_symbol="ARIZ"),
        make_record("2025-01-04T00:00:00", 5, token_id="arizcredits.near", block_height=1300,
                    balance_before=3, counterparty="NOT_REGISTERED", token_symbol="ARIZ"),
    ]
