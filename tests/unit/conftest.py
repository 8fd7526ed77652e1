"""Service and repo fixtures backed by in-memory SQLite."""

import pytest
import pytest_asyncio

from enb_server.account import AccountService
from enb_server.claims import ClaimService
from enb_server.invitation import InvitationService
from enb_server.leaderboard import LeaderboardService
from enb_server.storage import StorageManager


@pytest_asyncio.fixture
async def storage():
    sm = StorageManager(":memory:")
    await sm.initialize()
    yield sm
    await sm.close()


@pytest.fixture
def accounts(storage, clock):
    return AccountService(storage.accounts, storage.transactions, default_max_uses=5, clock=clock)


@pytest.fixture
def invitations(storage, clock):
    return InvitationService(
        storage.accounts, storage.invitations,
        default_max_uses=5, seed_max_uses=105, clock=clock,
    )


@pytest.fixture
def claims(storage, clock):
    return ClaimService(storage.accounts, clock=clock)


@pytest.fixture
def leaderboard(storage):
    return LeaderboardService(storage.accounts)


@pytest_asyncio.fixture
async def inviter(invitations, default_wallet, default_code):
    """The seeded default inviter account (105 uses)."""
    return await invitations.create_default_user(default_wallet, default_code)


@pytest.fixture
def member(accounts, invitations, inviter, default_code):
    """Factory: create and activate a wallet through the default inviter."""

    async def _create(wallet_address: str) -> dict:
        await accounts.create_account(wallet_address, "0x" + "ab" * 32)
        await invitations.activate(wallet_address, default_code)
        return await accounts.get_profile(wallet_address)

    return _create
