"""
Shared fixtures for ENB API integration tests.

Provides:
 - ApiServer instances on in-memory SQLite, with and without an admin key
 - TestClient wrappers that run the app lifespan (storage open/close)
"""

import pytest
from fastapi.testclient import TestClient

from enb_server.config import Settings
from enb_server.server import ApiServer

ADMIN_KEY = "test-admin-key"
TX_HASH = "0x" + "ab" * 32


# ── Fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture
def server(clock):
    return ApiServer(Settings(db_path=":memory:"), clock=clock)


@pytest.fixture
def client(server):
    with TestClient(server.app) as c:
        yield c


@pytest.fixture
def admin_server(clock):
    return ApiServer(Settings(db_path=":memory:", admin_key=ADMIN_KEY), clock=clock)


@pytest.fixture
def admin_client(admin_server):
    with TestClient(admin_server.app) as c:
        yield c


@pytest.fixture
def seeded(client, default_wallet, default_code):
    """Client with the default inviter already seeded."""
    resp = client.post("/api/create-default-user", json={
        "walletAddress": default_wallet, "invitationCode": default_code,
    })
    assert resp.status_code == 201
    return client


@pytest.fixture
def activated(seeded, default_code):
    """Factory: register and activate a wallet over HTTP."""

    def _create(wallet_address: str) -> dict:
        assert seeded.post("/api/create-account", json={
            "walletAddress": wallet_address, "transactionHash": TX_HASH,
        }).status_code == 201
        resp = seeded.post("/api/activate-account", json={
            "walletAddress": wallet_address, "invitationCode": default_code,
        })
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _create
