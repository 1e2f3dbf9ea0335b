"""Monitored account schemas"""
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class MonitoredAccountCreate(BaseModel):
    account_id: str
    enabled: bool = True


class MonitoredAccountUpdate(BaseModel):
    enabled: bool


class MonitoredAccountResponse(BaseModel):
    account_id: str
    enabled: bool
    last_synced_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
