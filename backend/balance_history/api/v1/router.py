"""API v1 router aggregation"""
from fastapi import APIRouter

from balance_history.api.v1 import balance_history, balance_changes, monitored_accounts

api_router = APIRouter()

api_router.include_router(balance_history.router, prefix="/balance-history", tags=["Balance History"])
api_router.include_router(balance_changes.router, prefix="/balance-changes", tags=["Balance Changes"])
api_router.include_router(monitored_accounts.router, prefix="/monitored-accounts", tags=["Monitored Accounts"])
