import sqlite3
import time
from typing import List, Optional

import aiosqlite

from enb_server.errors import AlreadyActivated, CodeTaken, DuplicateUsage, UsageLimitExceeded

from ._tx import Transactor

_COLUMNS = ("id", "invitation_code", "used_by", "inviter_wallet", "used_at")


class InvitationRepo:
    """Invitation redemptions: the usage ledger plus the activation write."""

    def __init__(self, db: aiosqlite.Connection, tx: Transactor):
        self._db = db
        self._tx = tx

    async def redeem(
        self,
        invitation_code: str,
        invitee: str,
        inviter: str,
        new_code: str,
        new_code_max_uses: int,
        now: Optional[float] = None,
    ) -> dict:
        """Activate ``invitee`` with ``inviter``'s code in a single transaction.

        The inviter's counter only moves while it is below the ceiling, and the
        usage row is unique per (code, wallet); either failing rolls back the
        whole activation.
        """
        now = now if now is not None else time.time()
        async with self._tx.immediate() as db:
            cursor = await db.execute(
                "UPDATE accounts SET current_invitation_uses = current_invitation_uses + 1, "
                "updated_at = ? "
                "WHERE wallet_address = ? AND is_activated = 1 "
                "AND current_invitation_uses < max_invitation_uses",
                (now, inviter),
            )
            if cursor.rowcount == 0:
                raise UsageLimitExceeded(
                    f"Invitation code {invitation_code} has reached its usage limit"
                )

            try:
                cursor = await db.execute(
                    "UPDATE accounts SET is_activated = 1, activated_at = ?, inviter_wallet = ?, "
                    "invitation_code = ?, max_invitation_uses = ?, updated_at = ? "
                    "WHERE wallet_address = ? AND is_activated = 0",
                    (now, inviter, new_code, new_code_max_uses, now, invitee),
                )
            except sqlite3.IntegrityError:
                raise CodeTaken(f"Invitation code {new_code} is already assigned")
            if cursor.rowcount == 0:
                raise AlreadyActivated(f"Account {invitee} is already activated")

            try:
                cursor = await db.execute(
                    "INSERT INTO invitation_usage (invitation_code, used_by, inviter_wallet, used_at) "
                    "VALUES (?, ?, ?, ?)",
                    (invitation_code, invitee, inviter, now),
                )
            except sqlite3.IntegrityError:
                raise DuplicateUsage(
                    f"Invitation code {invitation_code} was already used by {invitee}"
                )
            usage_id = cursor.lastrowid

            async with db.execute(
                "SELECT current_invitation_uses, max_invitation_uses FROM accounts "
                "WHERE wallet_address = ?",
                (inviter,),
            ) as cur:
                current_uses, max_uses = await cur.fetchone()

        return {
            "usage_id": usage_id,
            "current_uses": current_uses,
            "max_uses": max_uses,
            "activated_at": now,
        }

    async def has_usage(self, invitation_code: str, used_by: str) -> bool:
        async with self._db.execute(
            "SELECT 1 FROM invitation_usage WHERE invitation_code = ? AND used_by = ?",
            (invitation_code, used_by),
        ) as cursor:
            row = await cursor.fetchone()
        return row is not None

    async def list_for_code(self, invitation_code: str, limit: int = 100) -> List[dict]:
        results = []
        async with self._db.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM invitation_usage "
            "WHERE invitation_code = ? ORDER BY used_at DESC, id DESC LIMIT ?",
            (invitation_code, limit),
        ) as cursor:
            async for row in cursor:
                results.append(dict(zip(_COLUMNS, row)))
        return results

    async def count_since(self, invitation_code: str, since: float) -> int:
        async with self._db.execute(
            "SELECT COUNT(*) FROM invitation_usage WHERE invitation_code = ? AND used_at >= ?",
            (invitation_code, since),
        ) as cursor:
            row = await cursor.fetchone()
        return row[0]

    async def count(self) -> int:
        async with self._db.execute("SELECT COUNT(*) FROM invitation_usage") as cursor:
            row = await cursor.fetchone()
        return row[0]
