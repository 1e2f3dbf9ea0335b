"""Balance History Services"""
from .intervals import Interval, generate_sample_instants, parse_interval
from .snapshots import resolve_snapshots, balance_at, assemble_series, resolve_series_concurrently
from .export import select_export_records, format_export_row, render_csv
from .gap_detector import BalanceGap, find_gaps
from .ledger_store import LedgerRecordStore, SqlLedgerRecordStore, InMemoryLedgerRecordStore
from .history import BalanceHistoryService

__all__ = [
    # Sample instants
    "Interval",
    "generate_sample_instants",
    "parse_interval",
    # Snapshot resolution
    "resolve_snapshots",
    "balance_at",
    "assemble_series",
    "resolve_series_concurrently",
    # Export
    "select_export_records",
    "format_export_row",
    "render_csv",
    # Integrity
    "BalanceGap",
    "find_gaps",
    # Ledger access
    "LedgerRecordStore",
    "SqlLedgerRecordStore",
    "InMemoryLedgerRecordStore",
    "BalanceHistoryService",
]
