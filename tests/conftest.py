"""Shared fixtures for the ENB API test suite."""

from datetime import datetime, timedelta

import pytest


# ── Helpers ─────────────────────────────────────────────────────────────────

DEFAULT_WALLET = "0x1234567890abcdef1234567890abcdef12345678"
DEFAULT_CODE = "ENB2025"


def make_wallet(seed: int) -> str:
    """Deterministic, valid-format wallet address."""
    return "0x" + f"{seed:040x}"


class FakeClock:
    """Callable clock pinned to local noon so day shifts never cross a DST edge."""

    def __init__(self, start: datetime = datetime(2025, 3, 10, 12, 0, 0)):
        self.current = start

    def __call__(self) -> float:
        return self.current.timestamp()

    def advance(self, days: int = 0, hours: float = 0, minutes: float = 0):
        self.current += timedelta(days=days, hours=hours, minutes=minutes)

    def set(self, when: datetime):
        self.current = when


# ── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wallet():
    """Factory producing distinct wallet addresses: wallet(1), wallet(2), ..."""
    return make_wallet


@pytest.fixture
def default_wallet():
    return DEFAULT_WALLET


@pytest.fixture
def default_code():
    return DEFAULT_CODE
