"""
claims.py - Daily claim service.

Applies the reward calculator to an account and persists the result with a
compare-and-swap on the account version, so two simultaneous claims for the
same wallet cannot both be credited.
"""

import logging
import time
from typing import TYPE_CHECKING, Callable

from enb_server.account import iso, normalize_wallet
from enb_server.errors import AccountNotActivated, AccountNotFound, ConcurrentUpdate
from enb_server.rewards import calculate_daily_reward, claim_status

if TYPE_CHECKING:
    from enb_server.storage import AccountRepo

logger = logging.getLogger("claims")


class ClaimService:
    def __init__(self, accounts: "AccountRepo", clock: Callable[[], float] = time.time):
        self._accounts = accounts
        self._clock = clock

    async def _require_account(self, wallet: str) -> dict:
        acct = await self._accounts.get(wallet)
        if acct is None:
            raise AccountNotFound(wallet)
        return acct

    async def daily_claim(self, wallet_address: str, transaction_hash: str = "") -> dict:
        wallet = normalize_wallet(wallet_address)
        acct = await self._require_account(wallet)
        if not acct["is_activated"]:
            raise AccountNotActivated(f"Account {wallet} is not activated")

        now = self._clock()
        outcome = calculate_daily_reward(
            acct["last_daily_claim_time"], acct["consecutive_days"], acct["membership_level"], now,
        )
        result = await self._accounts.apply_claim(
            wallet,
            expected_version=acct["version"],
            new_streak=outcome.new_streak,
            reward=outcome.reward,
            claim_time=now,
            description=f"Daily claim (day {outcome.new_streak})",
            reference_id=(transaction_hash or "").strip(),
        )
        if result is None:
            logger.warning("Concurrent claim for %s rejected", wallet)
            raise ConcurrentUpdate(f"Account {wallet} was modified concurrently, retry the claim")

        logger.info(
            "Daily claim %s: reward=%d streak=%d level=%s balance=%.2f",
            wallet, outcome.reward, outcome.new_streak, acct["membership_level"], result["balance_after"],
        )
        return {
            "message": "Daily reward claimed",
            "walletAddress": wallet,
            "reward": outcome.reward,
            "consecutiveDays": outcome.new_streak,
            "newBalance": result["balance_after"],
            "totalEarned": result["total_earned"],
            "membershipLevel": acct["membership_level"],
            "lastDailyClaimTime": iso(now),
            "transactionId": result["transaction_id"],
        }

    async def status(self, wallet_address: str) -> dict:
        wallet = normalize_wallet(wallet_address)
        acct = await self._require_account(wallet)
        result = claim_status(acct["last_daily_claim_time"], acct["consecutive_days"], self._clock())
        result["walletAddress"] = wallet
        result["lastDailyClaimTime"] = iso(acct["last_daily_claim_time"])
        return result
