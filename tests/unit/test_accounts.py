"""Account creation, listing, balance adjustments and membership upgrades."""

import pytest

from enb_server.account import normalize_wallet
from enb_server.errors import (
    AccountExists,
    AccountNotActivated,
    AccountNotFound,
    DomainRuleError,
    InsufficientBalance,
    InvalidUpgrade,
)

TX_HASH = "0x" + "ef" * 32


class TestWalletFormat:

    def test_lowercases(self):
        assert normalize_wallet("0x" + "AbCd" * 10) == "0x" + "abcd" * 10

    @pytest.mark.parametrize("bad", ["", "0x123", "abcd" * 10, "0x" + "g" * 40, None])
    def test_rejects_malformed(self, bad):
        with pytest.raises(DomainRuleError):
            normalize_wallet(bad)


@pytest.mark.asyncio
class TestCreate:

    async def test_new_account_defaults(self, accounts, wallet):
        profile = await accounts.create_account(wallet(1), TX_HASH)
        assert profile["walletAddress"] == wallet(1)
        assert profile["membershipLevel"] == "Based"
        assert profile["enbBalance"] == 0
        assert profile["totalEarned"] == 0
        assert profile["isActivated"] is False
        assert profile["invitationCode"] is None
        assert profile["consecutiveDays"] == 0
        assert profile["lastDailyClaimTime"] is None
        assert profile["transactionHash"] == TX_HASH

    async def test_duplicate_rejected(self, accounts, wallet):
        await accounts.create_account(wallet(1), TX_HASH)
        with pytest.raises(AccountExists):
            await accounts.create_account(wallet(1), TX_HASH)

    async def test_duplicate_in_other_case_rejected(self, accounts):
        await accounts.create_account("0x" + "ab" * 20, TX_HASH)
        with pytest.raises(AccountExists):
            await accounts.create_account("0x" + "AB" * 20, TX_HASH)

    async def test_missing_transaction_hash(self, accounts, wallet):
        with pytest.raises(DomainRuleError, match="Missing required fields"):
            await accounts.create_account(wallet(1), "  ")

    async def test_profile_not_found(self, accounts, wallet):
        with pytest.raises(AccountNotFound):
            await accounts.get_profile(wallet(1))


@pytest.mark.asyncio
class TestListUsers:

    async def test_filters_and_total(self, accounts, member, wallet):
        await member(wallet(1))
        await member(wallet(2))
        await accounts.create_account(wallet(3), TX_HASH)
        await accounts.update_membership(wallet(2), "Legendary", TX_HASH)

        everyone = await accounts.list_users()
        # default inviter + three wallets
        assert everyone["total"] == 4

        pending = await accounts.list_users(is_activated=False)
        assert [u["walletAddress"] for u in pending["users"]] == [wallet(3)]

        legendary = await accounts.list_users(membership_level="Legendary")
        assert legendary["total"] == 1
        assert legendary["users"][0]["walletAddress"] == wallet(2)

    async def test_pagination(self, clock, accounts, wallet):
        for i in range(1, 6):
            await accounts.create_account(wallet(i), TX_HASH)
            clock.advance(minutes=1)
        page = await accounts.list_users(limit=2, offset=2)
        assert page["total"] == 5
        assert page["limit"] == 2
        assert page["offset"] == 2
        # newest first
        assert [u["walletAddress"] for u in page["users"]] == [wallet(3), wallet(2)]

    async def test_limit_clamped(self, accounts):
        assert (await accounts.list_users(limit=0))["limit"] == 1
        assert (await accounts.list_users(limit=10_000))["limit"] == 1000

    async def test_unknown_level_filter(self, accounts):
        with pytest.raises(DomainRuleError):
            await accounts.list_users(membership_level="Gold")


@pytest.mark.asyncio
class TestBalance:

    async def test_credit_then_debit(self, accounts, member, wallet):
        await member(wallet(1))
        credit = await accounts.update_balance(wallet(1), 100, "credit", "bonus")
        assert credit["balanceBefore"] == 0
        assert credit["newBalance"] == 100

        debit = await accounts.update_balance(wallet(1), 40, "debit", "purchase")
        assert debit["newBalance"] == 60

        profile = await accounts.get_profile(wallet(1))
        assert profile["enbBalance"] == 60
        assert profile["totalEarned"] == 100

    async def test_overdraft_rejected(self, accounts, member, wallet):
        await member(wallet(1))
        await accounts.update_balance(wallet(1), 5, "credit")
        with pytest.raises(InsufficientBalance):
            await accounts.update_balance(wallet(1), 6, "debit")
        profile = await accounts.get_profile(wallet(1))
        assert profile["enbBalance"] == 5

    async def test_exact_debit_to_zero(self, accounts, member, wallet):
        await member(wallet(1))
        await accounts.update_balance(wallet(1), 5, "credit")
        result = await accounts.update_balance(wallet(1), 5, "debit")
        assert result["newBalance"] == 0

    @pytest.mark.parametrize("amount", [0, -3, None, float("nan"), float("inf"), float("-inf")])
    async def test_non_positive_amount(self, accounts, member, wallet, amount):
        await member(wallet(1))
        with pytest.raises(DomainRuleError):
            await accounts.update_balance(wallet(1), amount, "credit")

    @pytest.mark.parametrize("amount", [float("inf"), float("nan")])
    async def test_non_finite_amount_leaves_account_readable(self, accounts, leaderboard, member,
                                                             wallet, amount):
        await member(wallet(1))
        await accounts.update_balance(wallet(1), 5, "credit")
        for tx_type in ("credit", "debit"):
            with pytest.raises(DomainRuleError):
                await accounts.update_balance(wallet(1), amount, tx_type)

        profile = await accounts.get_profile(wallet(1))
        assert profile["enbBalance"] == 5
        assert profile["totalEarned"] == 5
        board = await leaderboard.leaderboard("balance")
        assert board["leaderboard"][0]["enbBalance"] == 5

    async def test_unknown_type(self, accounts, member, wallet):
        await member(wallet(1))
        with pytest.raises(DomainRuleError):
            await accounts.update_balance(wallet(1), 5, "refund")

    async def test_unknown_wallet(self, accounts, wallet):
        with pytest.raises(AccountNotFound):
            await accounts.update_balance(wallet(9), 5, "credit")

    async def test_transaction_history(self, clock, accounts, member, wallet):
        await member(wallet(1))
        await accounts.update_balance(wallet(1), 10, "credit", "first")
        clock.advance(minutes=5)
        await accounts.update_balance(wallet(1), 3, "debit", "second")

        history = await accounts.list_transactions(wallet(1))
        txs = history["transactions"]
        assert [t["description"] for t in txs] == ["second", "first"]
        assert txs[0]["balanceBefore"] == 10
        assert txs[0]["balanceAfter"] == 7

        assert len((await accounts.list_transactions(wallet(1), limit=1))["transactions"]) == 1


@pytest.mark.asyncio
class TestMembership:

    async def test_upgrade_path(self, accounts, member, wallet):
        await member(wallet(1))
        profile = await accounts.update_membership(wallet(1), "Super Based", TX_HASH)
        assert profile["membershipLevel"] == "SuperBased"
        profile = await accounts.update_membership(wallet(1), "Legendary", TX_HASH)
        assert profile["membershipLevel"] == "Legendary"

    async def test_upgrade_keeps_creation_hash(self, accounts, member, wallet):
        await member(wallet(1))
        profile = await accounts.update_membership(wallet(1), "Legendary", "0x" + "99" * 32)
        assert profile["transactionHash"] == "0x" + "ab" * 32

    async def test_downgrade_rejected(self, accounts, member, wallet):
        await member(wallet(1))
        await accounts.update_membership(wallet(1), "Legendary", TX_HASH)
        with pytest.raises(InvalidUpgrade):
            await accounts.update_membership(wallet(1), "SuperBased", TX_HASH)

    async def test_same_level_rejected(self, accounts, member, wallet):
        await member(wallet(1))
        with pytest.raises(InvalidUpgrade):
            await accounts.update_membership(wallet(1), "Based", TX_HASH)

    async def test_requires_activation(self, accounts, wallet):
        await accounts.create_account(wallet(1), TX_HASH)
        with pytest.raises(AccountNotActivated):
            await accounts.update_membership(wallet(1), "Legendary", TX_HASH)

    async def test_requires_transaction_hash(self, accounts, member, wallet):
        await member(wallet(1))
        with pytest.raises(DomainRuleError):
            await accounts.update_membership(wallet(1), "Legendary", "")
