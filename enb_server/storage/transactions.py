import time
from typing import List, Optional

import aiosqlite

_COLUMNS = (
    "id", "wallet_address", "type", "amount", "balance_before",
    "balance_after", "description", "reference_id", "created_at",
)


async def insert_transaction(
    db: aiosqlite.Connection,
    wallet_address: str,
    tx_type: str,
    amount: float,
    balance_before: float,
    balance_after: float,
    description: str = "",
    reference_id: str = "",
    created_at: Optional[float] = None,
) -> int:
    """Append a ledger row. Does not commit; callers run it inside their transaction."""
    cursor = await db.execute(
        "INSERT INTO transactions (wallet_address, type, amount, balance_before, "
        "balance_after, description, reference_id, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        (
            wallet_address, tx_type, amount, balance_before, balance_after,
            description, reference_id,
            created_at if created_at is not None else time.time(),
        ),
    )
    return cursor.lastrowid


class TransactionRepo:
    """Read-only queries for the transactions audit log."""

    def __init__(self, db: aiosqlite.Connection):
        self._db = db

    async def get(self, tx_id: int) -> Optional[dict]:
        async with self._db.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM transactions WHERE id = ?",
            (tx_id,),
        ) as cursor:
            row = await cursor.fetchone()
        return dict(zip(_COLUMNS, row)) if row else None

    async def list_for_wallet(self, wallet_address: str, limit: int = 20) -> List[dict]:
        results = []
        async with self._db.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM transactions "
            "WHERE wallet_address = ? ORDER BY created_at DESC, id DESC LIMIT ?",
            (wallet_address, limit),
        ) as cursor:
            async for row in cursor:
                results.append(dict(zip(_COLUMNS, row)))
        return results

    async def count(self, wallet_address: Optional[str] = None) -> int:
        if wallet_address is None:
            sql, params = "SELECT COUNT(*) FROM transactions", ()
        else:
            sql, params = "SELECT COUNT(*) FROM transactions WHERE wallet_address = ?", (wallet_address,)
        async with self._db.execute(sql, params) as cursor:
            row = await cursor.fetchone()
        return row[0]
