"""Balance change ledger models.

Rows in ``balance_changes`` are written by the indexer and never updated or
deleted afterwards. This service only reads them.
"""
from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    BigInteger,
    SmallInteger,
    String,
    Text,
    DateTime,
    Numeric,
    JSON,
    Index,
    UniqueConstraint,
    CheckConstraint,
)

from balance_history.models.database import Base

NATIVE_TOKEN_ID = "near"

# Counterparty sentinels written by the indexer
SNAPSHOT_COUNTERPARTY = "SNAPSHOT"
NOT_REGISTERED_COUNTERPARTY = "NOT_REGISTERED"


class BalanceChange(Base):
    """One recorded change of an account's balance for one token"""
    __tablename__ = "balance_changes"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    account_id = Column(String(128), nullable=False, index=True)

    # Block metadata
    block_height = Column(BigInteger, nullable=False)
    block_timestamp = Column(BigInteger, nullable=False)  # nanoseconds since epoch
    block_time = Column(DateTime, nullable=False)  # UTC, derived from block_timestamp

    # Transaction info
    transaction_hashes = Column(JSON, nullable=False, default=list)
    receipt_id = Column(JSON, nullable=False, default=list)
    signer_id = Column(String(128), nullable=True)
    receiver_id = Column(String(128), nullable=True)

    # Token and transfer data
    token_id = Column(String(128), nullable=False, index=True)
    counterparty = Column(String(128), nullable=False)
    amount = Column(Numeric, nullable=False)  # decimal-adjusted, negative for outgoing
    balance_before = Column(Numeric, nullable=False)
    balance_after = Column(Numeric, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("account_id", "block_height", "token_id", name="unique_account_block_token"),
        Index("ix_balance_changes_account_token_time", "account_id", "token_id", "block_time"),
        Index("ix_balance_changes_account_time", "account_id", "block_time"),
        CheckConstraint("block_height > 0", name="positive_block_height"),
        CheckConstraint("block_timestamp > 0", name="positive_block_timestamp"),
    )

    def __repr__(self):
        return f"<BalanceChange {self.account_id} {self.token_id} @{self.block_height}>"


class Counterparty(Base):
    """Metadata about accounts seen in balance changes (token contracts included)"""
    __tablename__ = "counterparties"

    account_id = Column(String(128), primary_key=True)
    account_type = Column(String(32), nullable=False)  # ft_token, staking_pool, dao, personal, system, other

    # FT token metadata (NULL for non-FT accounts)
    token_symbol = Column(String(16), nullable=True, index=True)
    token_name = Column(Text, nullable=True)
    token_decimals = Column(SmallInteger, nullable=True)

    discovered_at = Column(DateTime, default=datetime.utcnow)
    last_verified_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<Counterparty {self.account_id} ({self.account_type})>"
