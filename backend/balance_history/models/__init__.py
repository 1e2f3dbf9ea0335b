"""Database models"""
from balance_history.models.database import Base, get_db
from balance_history.models.balance_change import (
    BalanceChange,
    Counterparty,
    NATIVE_TOKEN_ID,
    SNAPSHOT_COUNTERPARTY,
    NOT_REGISTERED_COUNTERPARTY,
)
from balance_history.models.monitored_account import MonitoredAccount

__all__ = [
    "Base",
    "get_db",
    # Ledger
    "BalanceChange",
    "Counterparty",
    "NATIVE_TOKEN_ID",
    "SNAPSHOT_COUNTERPARTY",
    "NOT_REGISTERED_COUNTERPARTY",
    # Monitoring
    "MonitoredAccount",
]
