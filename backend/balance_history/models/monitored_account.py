"""Monitored account model"""
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime

from balance_history.models.database import Base


class MonitoredAccount(Base):
    """Treasury account the indexer keeps collecting balance changes for"""
    __tablename__ = "monitored_accounts"

    account_id = Column(String(128), primary_key=True)
    enabled = Column(Boolean, nullable=False, default=True, index=True)
    last_synced_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<MonitoredAccount {self.account_id} enabled={self.enabled}>"
