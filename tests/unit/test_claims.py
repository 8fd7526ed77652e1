"""
test_claims.py - Daily claim flow against storage.

Covers streak progression over the fake clock, the calendar-day cooldown,
membership multipliers and the compare-and-swap that stops double credits.
"""

import asyncio

import pytest

from enb_server.errors import (
    AccountNotActivated,
    AccountNotFound,
    AlreadyClaimedToday,
    ConcurrentUpdate,
)

pytestmark = pytest.mark.asyncio

TX_HASH = "0x" + "cd" * 32


class TestDailyClaim:

    async def test_first_claim_then_next_day(self, clock, claims, member, wallet):
        await member(wallet(0xabc))

        first = await claims.daily_claim(wallet(0xabc))
        assert first["reward"] == 10
        assert first["consecutiveDays"] == 1
        assert first["newBalance"] == 10

        clock.advance(days=1)
        second = await claims.daily_claim(wallet(0xabc))
        assert second["reward"] == 20
        assert second["consecutiveDays"] == 2
        assert second["newBalance"] == 30
        assert second["totalEarned"] == 30

        clock.advance(hours=3)
        with pytest.raises(AlreadyClaimedToday):
            await claims.daily_claim(wallet(0xabc))

    async def test_rejected_claim_leaves_balance(self, clock, claims, accounts, member, wallet):
        await member(wallet(1))
        await claims.daily_claim(wallet(1))
        with pytest.raises(AlreadyClaimedToday):
            await claims.daily_claim(wallet(1))
        profile = await accounts.get_profile(wallet(1))
        assert profile["enbBalance"] == 10
        assert profile["consecutiveDays"] == 1

    async def test_week_of_claims(self, clock, claims, member, wallet):
        await member(wallet(1))
        rewards = []
        for _ in range(7):
            rewards.append((await claims.daily_claim(wallet(1)))["reward"])
            clock.advance(days=1)
        assert rewards == [10, 20, 30, 40, 50, 50, 50]

    async def test_missed_day_resets_streak(self, clock, claims, member, wallet):
        await member(wallet(1))
        await claims.daily_claim(wallet(1))
        clock.advance(days=1)
        await claims.daily_claim(wallet(1))
        clock.advance(days=2)
        result = await claims.daily_claim(wallet(1))
        assert result["consecutiveDays"] == 1
        assert result["reward"] == 10
        assert result["newBalance"] == 40

    async def test_legendary_doubles_reward(self, clock, claims, accounts, member, wallet):
        await member(wallet(1))
        await accounts.update_membership(wallet(1), "Legendary", TX_HASH)
        result = await claims.daily_claim(wallet(1))
        assert result["reward"] == 20
        assert result["membershipLevel"] == "Legendary"

    async def test_super_based_rounds_down(self, clock, claims, accounts, member, wallet):
        await member(wallet(1))
        await accounts.update_membership(wallet(1), "SuperBased", TX_HASH)
        rewards = []
        for _ in range(3):
            rewards.append((await claims.daily_claim(wallet(1)))["reward"])
            clock.advance(days=1)
        assert rewards == [15, 30, 45]

    async def test_claim_writes_ledger_row(self, claims, storage, member, wallet):
        await member(wallet(1))
        result = await claims.daily_claim(wallet(1), transaction_hash=TX_HASH)
        tx = await storage.transactions.get(result["transactionId"])
        assert tx["type"] == "credit"
        assert tx["amount"] == 10
        assert tx["balance_before"] == 0
        assert tx["balance_after"] == 10
        assert tx["reference_id"] == TX_HASH
        assert tx["description"] == "Daily claim (day 1)"

    async def test_unactivated_account(self, claims, accounts, wallet):
        await accounts.create_account(wallet(1), TX_HASH)
        with pytest.raises(AccountNotActivated):
            await claims.daily_claim(wallet(1))

    async def test_unknown_account(self, claims, wallet):
        with pytest.raises(AccountNotFound):
            await claims.daily_claim(wallet(42))

    async def test_invalid_wallet(self, claims):
        with pytest.raises(ValueError):
            await claims.daily_claim("0xabc")


class TestClaimRace:

    async def test_upgrade_invalidates_claim_read_before_it(self, clock, storage, accounts,
                                                            member, wallet):
        await member(wallet(1))
        before = await storage.accounts.get(wallet(1))
        await accounts.update_membership(wallet(1), "Legendary", TX_HASH)

        assert await storage.accounts.apply_claim(
            wallet(1), before["version"], 1, 10, clock(),
        ) is None
        after = await storage.accounts.get(wallet(1))
        assert after["version"] == before["version"] + 1
        assert after["enb_balance"] == 0

    async def test_stale_version_is_rejected(self, clock, storage, member, wallet):
        await member(wallet(1))
        acct = await storage.accounts.get(wallet(1))
        first = await storage.accounts.apply_claim(
            wallet(1), acct["version"], 1, 10, clock(),
        )
        assert first is not None
        second = await storage.accounts.apply_claim(
            wallet(1), acct["version"], 1, 10, clock(),
        )
        assert second is None
        after = await storage.accounts.get(wallet(1))
        assert after["enb_balance"] == 10

    async def test_concurrent_claims_credit_once(self, claims, storage, member, wallet):
        await member(wallet(1))
        results = await asyncio.gather(
            claims.daily_claim(wallet(1)),
            claims.daily_claim(wallet(1)),
            return_exceptions=True,
        )
        succeeded = [r for r in results if isinstance(r, dict)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(succeeded) == 1
        assert len(failed) == 1
        assert isinstance(failed[0], (ConcurrentUpdate, AlreadyClaimedToday))

        acct = await storage.accounts.get(wallet(1))
        assert acct["enb_balance"] == 10
        assert await storage.transactions.count(wallet(1)) == 1


class TestClaimStatus:

    async def test_status_before_and_after(self, clock, claims, member, wallet):
        await member(wallet(1))
        before = await claims.status(wallet(1))
        assert before["canClaim"] is True
        assert before["lastDailyClaimTime"] is None

        await claims.daily_claim(wallet(1))
        after = await claims.status(wallet(1))
        assert after["canClaim"] is False
        assert after["lastClaimToday"] is True
        assert after["consecutiveDays"] == 1
        assert after["lastDailyClaimTime"] is not None

        clock.advance(days=1)
        tomorrow = await claims.status(wallet(1))
        assert tomorrow["canClaim"] is True
        assert tomorrow["consecutiveDays"] == 1

    async def test_status_unknown_account(self, claims, wallet):
        with pytest.raises(AccountNotFound):
            await claims.status(wallet(7))
