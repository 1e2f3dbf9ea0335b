#!/usr/bin/env python3
"""
Load balance change records from a JSON dump into the balance_changes table.

Intended for seeding development and test databases. Existing rows for the
account are replaced.

Expected file layout:
    {
      "account_id": "example.sputnik-dao.near",
      "changes": [
        {"block_height": 1, "block_timestamp": 1735689600000000000,
         "token_id": "near", "counterparty": "alice.near",
         "amount": "100", "balance_before": "0", "balance_after": "100",
         "transaction_hashes": ["..."], "receipt_id": ["..."]}
      ]
    }

Usage:
    cd backend
    python load_ledger_data.py path/to/dump.json [--dry-run]

Options:
    --dry-run    Show what would be loaded without making changes
"""

import asyncio
import json
import sys
from decimal import Decimal
from sqlalchemy import delete

from balance_history.models.database import async_session_factory, init_db
from balance_history.models.balance_change import (
    BalanceChange,
    NATIVE_TOKEN_ID,
    NOT_REGISTERED_COUNTERPARTY,
)
from balance_history.services.records import block_timestamp_to_datetime


def build_row(account_id: str, change: dict) -> BalanceChange:
    """Build a BalanceChange row from one dump entry."""
    return BalanceChange(
        account_id=account_id,
        block_height=int(change["block_height"]),
        block_timestamp=int(change["block_timestamp"]),
        block_time=block_timestamp_to_datetime(int(change["block_timestamp"])),
        token_id=change.get("token_id") or NATIVE_TOKEN_ID,
        counterparty=change.get("counterparty") or NOT_REGISTERED_COUNTERPARTY,
        amount=Decimal(str(change["amount"])),
        balance_before=Decimal(str(change["balance_before"])),
        balance_after=Decimal(str(change["balance_after"])),
        transaction_hashes=list(change.get("transaction_hashes") or []),
        receipt_id=list(change.get("receipt_id") or []),
        signer_id=change.get("signer_id"),
        receiver_id=change.get("receiver_id"),
    )


async def load_ledger_data(path: str, dry_run: bool = False):
    """Replace an account's balance changes with the contents of a dump file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    account_id = data["account_id"]
    rows = [build_row(account_id, change) for change in data.get("changes", [])]

    print(f"Account: {account_id}")
    print(f"Found {len(rows)} balance changes in {path}.\n")

    tokens = sorted({row.token_id for row in rows})
    for token_id in tokens:
        count = sum(1 for row in rows if row.token_id == token_id)
        print(f"  {token_id}: {count} record(s)")

    if dry_run:
        print(f"\n[DRY RUN] Would load {len(rows)} record(s).")
        return

    await init_db()
    async with async_session_factory() as session:
        await session.execute(delete(BalanceChange).where(BalanceChange.account_id == account_id))
        session.add_all(rows)
        await session.commit()

    print(f"\n✅ Loaded {len(rows)} record(s).")


def main():
    args = [a for a in sys.argv[1:] if not a.startswith("-")]
    dry_run = "--dry-run" in sys.argv or "-n" in sys.argv

    if not args:
        print(__doc__)
        sys.exit(1)

    if dry_run:
        print("=== DRY RUN MODE ===\n")
    else:
        print("=== LOADING DATA ===\n")

    asyncio.run(load_ledger_data(args[0], dry_run))


if __name__ == "__main__":
    main()
