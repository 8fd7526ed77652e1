import logging
import math
import sqlite3
import time
from typing import List, Optional

import aiosqlite

from enb_server.errors import AccountNotFound, CodeTaken, InsufficientBalance

from ._tx import Transactor
from .transactions import insert_transaction

logger = logging.getLogger("storage")

_COLUMNS = (
    "wallet_address", "membership_level", "enb_balance", "total_earned",
    "invitation_code", "max_invitation_uses", "current_invitation_uses",
    "is_activated", "inviter_wallet", "transaction_hash",
    "last_daily_claim_time", "consecutive_days", "version",
    "created_at", "activated_at", "updated_at",
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM accounts"

# Columns a leaderboard may order by; never interpolate anything else.
RANKABLE_COLUMNS = ("enb_balance", "total_earned", "consecutive_days")


def _row_to_account(row) -> dict:
    acct = dict(zip(_COLUMNS, row))
    acct["is_activated"] = bool(acct["is_activated"])
    return acct


def _check_rankable(column: str):
    if column not in RANKABLE_COLUMNS:
        raise ValueError(f"Cannot rank by {column!r}")


class AccountRepo:
    """CRUD operations for the accounts table."""

    def __init__(self, db: aiosqlite.Connection, tx: Transactor):
        self._db = db
        self._tx = tx

    async def create(
        self, wallet_address: str, transaction_hash: str = "", max_uses: int = 5,
        now: Optional[float] = None,
    ) -> bool:
        """Insert an unactivated account. Returns False if the wallet already exists."""
        now = now if now is not None else time.time()
        async with self._tx.immediate() as db:
            cursor = await db.execute(
                "INSERT OR IGNORE INTO accounts (wallet_address, transaction_hash, "
                "max_invitation_uses, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (wallet_address, transaction_hash or None, max_uses, now, now),
            )
            created = cursor.rowcount > 0
        return created

    async def get(self, wallet_address: str) -> Optional[dict]:
        async with self._db.execute(
            f"{_SELECT} WHERE wallet_address = ?", (wallet_address,),
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_account(row) if row else None

    async def get_by_invitation_code(self, code: str) -> Optional[dict]:
        if not code:
            return None
        async with self._db.execute(
            f"{_SELECT} WHERE invitation_code = ?", (code,),
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_account(row) if row else None

    async def upsert_seeded(
        self, wallet_address: str, invitation_code: str, max_uses: int,
        now: Optional[float] = None,
    ) -> dict:
        """Create or refresh an activated inviter account holding ``invitation_code``."""
        now = now if now is not None else time.time()
        async with self._tx.immediate() as db:
            try:
                await db.execute(
                    "INSERT INTO accounts (wallet_address, invitation_code, max_invitation_uses, "
                    "is_activated, created_at, activated_at, updated_at) "
                    "VALUES (?, ?, ?, 1, ?, ?, ?) "
                    "ON CONFLICT(wallet_address) DO UPDATE SET "
                    "invitation_code = excluded.invitation_code, "
                    "max_invitation_uses = MAX(excluded.max_invitation_uses, current_invitation_uses), "
                    "is_activated = 1, "
                    "activated_at = COALESCE(activated_at, excluded.activated_at), "
                    "updated_at = excluded.updated_at",
                    (wallet_address, invitation_code, max_uses, now, now, now),
                )
            except sqlite3.IntegrityError:
                raise CodeTaken(f"Invitation code {invitation_code} is already assigned")
        return await self.get(wallet_address)

    async def set_membership(
        self, wallet_address: str, level: str, now: Optional[float] = None,
    ) -> bool:
        now = now if now is not None else time.time()
        async with self._tx.immediate() as db:
            cursor = await db.execute(
                "UPDATE accounts SET membership_level = ?, version = version + 1, "
                "updated_at = ? WHERE wallet_address = ?",
                (level, now, wallet_address),
            )
            updated = cursor.rowcount > 0
        return updated

    async def apply_claim(
        self,
        wallet_address: str,
        expected_version: int,
        new_streak: int,
        reward: float,
        claim_time: float,
        description: str = "",
        reference_id: str = "",
    ) -> Optional[dict]:
        """Credit a daily reward if the account is still at ``expected_version``.

        Returns the balance movement, or None when another write got there first.
        """
        async with self._tx.immediate() as db:
            async with db.execute(
                "SELECT enb_balance, total_earned FROM accounts WHERE wallet_address = ?",
                (wallet_address,),
            ) as cursor:
                row = await cursor.fetchone()
            if row is None:
                raise AccountNotFound(wallet_address)
            balance_before, earned_before = row
            cursor = await db.execute(
                "UPDATE accounts SET enb_balance = enb_balance + ?, "
                "total_earned = total_earned + ?, consecutive_days = ?, "
                "last_daily_claim_time = ?, version = version + 1, updated_at = ? "
                "WHERE wallet_address = ? AND version = ?",
                (reward, reward, new_streak, claim_time, claim_time,
                 wallet_address, expected_version),
            )
            if cursor.rowcount == 0:
                return None
            tx_id = await insert_transaction(
                db, wallet_address, "credit", reward,
                balance_before, balance_before + reward,
                description=description, reference_id=reference_id,
                created_at=claim_time,
            )
        return {
            "transaction_id": tx_id,
            "balance_before": balance_before,
            "balance_after": balance_before + reward,
            "total_earned": earned_before + reward,
        }

    async def adjust_balance(
        self,
        wallet_address: str,
        amount: float,
        tx_type: str,
        description: str = "",
        reference_id: str = "",
        now: Optional[float] = None,
    ) -> dict:
        """Credit or debit ``amount`` and append the matching ledger row atomically."""
        if not math.isfinite(amount) or amount <= 0:
            raise ValueError("Amount must be a positive number")
        if tx_type not in ("credit", "debit"):
            raise ValueError(f"Unknown transaction type {tx_type!r}")
        now = now if now is not None else time.time()
        async with self._tx.immediate() as db:
            async with db.execute(
                "SELECT enb_balance FROM accounts WHERE wallet_address = ?",
                (wallet_address,),
            ) as cursor:
                row = await cursor.fetchone()
            if row is None:
                raise AccountNotFound(wallet_address)
            balance_before = row[0]
            if tx_type == "debit":
                cursor = await db.execute(
                    "UPDATE accounts SET enb_balance = enb_balance - ?, "
                    "version = version + 1, updated_at = ? "
                    "WHERE wallet_address = ? AND enb_balance >= ?",
                    (amount, now, wallet_address, amount),
                )
                if cursor.rowcount == 0:
                    raise InsufficientBalance(
                        f"Insufficient balance: have {balance_before:.2f}, need {amount:.2f}"
                    )
                balance_after = balance_before - amount
            else:
                await db.execute(
                    "UPDATE accounts SET enb_balance = enb_balance + ?, "
                    "total_earned = total_earned + ?, version = version + 1, updated_at = ? "
                    "WHERE wallet_address = ?",
                    (amount, amount, now, wallet_address),
                )
                balance_after = balance_before + amount
            tx_id = await insert_transaction(
                db, wallet_address, tx_type, amount, balance_before, balance_after,
                description=description, reference_id=reference_id, created_at=now,
            )
        logger.info(
            "Balance %s %s %.2f: %.2f -> %.2f",
            wallet_address, tx_type, amount, balance_before, balance_after,
        )
        return {
            "transaction_id": tx_id,
            "balance_before": balance_before,
            "balance_after": balance_after,
        }

    @staticmethod
    def _filters(membership_level: Optional[str], is_activated: Optional[bool]):
        clauses, params = [], []
        if membership_level is not None:
            clauses.append("membership_level = ?")
            params.append(membership_level)
        if is_activated is not None:
            clauses.append("is_activated = ?")
            params.append(1 if is_activated else 0)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    async def list_filtered(
        self,
        membership_level: Optional[str] = None,
        is_activated: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[dict]:
        where, params = self._filters(membership_level, is_activated)
        results = []
        async with self._db.execute(
            f"{_SELECT}{where} ORDER BY created_at DESC, wallet_address LIMIT ? OFFSET ?",
            (*params, limit, offset),
        ) as cursor:
            async for row in cursor:
                results.append(_row_to_account(row))
        return results

    async def count(
        self, membership_level: Optional[str] = None, is_activated: Optional[bool] = None,
    ) -> int:
        where, params = self._filters(membership_level, is_activated)
        async with self._db.execute(f"SELECT COUNT(*) FROM accounts{where}", params) as cursor:
            row = await cursor.fetchone()
        return row[0]

    async def top_by(self, column: str, limit: int) -> List[dict]:
        """Activated accounts ordered by ``column`` descending."""
        _check_rankable(column)
        results = []
        async with self._db.execute(
            f"{_SELECT} WHERE is_activated = 1 "
            f"ORDER BY {column} DESC, wallet_address ASC LIMIT ?",
            (limit,),
        ) as cursor:
            async for row in cursor:
                results.append(_row_to_account(row))
        return results

    async def count_greater(self, column: str, value: float) -> int:
        _check_rankable(column)
        async with self._db.execute(
            f"SELECT COUNT(*) FROM accounts WHERE is_activated = 1 AND {column} > ?",
            (value,),
        ) as cursor:
            row = await cursor.fetchone()
        return row[0]
