"""
leaderboard.py - Leaderboards and per-user rankings.

Recomputed on every request from the accounts table; only activated
accounts take part. A user's rank is one more than the number of activated
accounts with a strictly greater value, so ties share a rank.
"""

import logging
from typing import TYPE_CHECKING, Dict

from enb_server.account import clamp, normalize_wallet
from enb_server.errors import AccountNotFound, NotFoundError

if TYPE_CHECKING:
    from enb_server.storage import AccountRepo

logger = logging.getLogger("leaderboard")

DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# board name -> (storage column, API field)
BOARDS: Dict[str, tuple] = {
    "balance": ("enb_balance", "enbBalance"),
    "earnings": ("total_earned", "totalEarned"),
    "streaks": ("consecutive_days", "consecutiveDays"),
}


class LeaderboardService:
    def __init__(self, accounts: "AccountRepo"):
        self._accounts = accounts

    async def leaderboard(self, board: str, limit: int = DEFAULT_LIMIT) -> dict:
        if board not in BOARDS:
            raise NotFoundError(f"Unknown leaderboard {board!r}")
        column, field = BOARDS[board]
        rows = await self._accounts.top_by(column, clamp(limit, 1, MAX_LIMIT))
        entries = []
        for i, r in enumerate(rows):
            # ties share the rank of the first row holding that value
            if i == 0 or r[column] != rows[i - 1][column]:
                rank = i + 1
            entries.append({
                "rank": rank,
                "walletAddress": r["wallet_address"],
                "membershipLevel": r["membership_level"],
                field: r[column],
            })
        return {"type": board, "field": field, "leaderboard": entries}

    async def rankings(self, wallet_address: str) -> dict:
        wallet = normalize_wallet(wallet_address)
        acct = await self._accounts.get(wallet)
        if acct is None:
            raise AccountNotFound(wallet)
        rankings = {}
        for board, (column, field) in BOARDS.items():
            above = await self._accounts.count_greater(column, acct[column])
            rankings[board] = {"field": field, "value": acct[column], "rank": above + 1}
        return {
            "walletAddress": wallet,
            "isActivated": acct["is_activated"],
            "rankings": rankings,
            "totalUsers": await self._accounts.count(is_activated=True),
        }
