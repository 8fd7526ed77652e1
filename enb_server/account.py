"""
account.py - Account service.

Account creation, profiles, user listing, manual balance adjustments and
membership upgrades, backed by AccountRepo and TransactionRepo. Renders
storage rows into the camelCase payloads the mini app consumes.
"""

import logging
import math
import re
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Optional

from enb_server.errors import (
    AccountExists,
    AccountNotActivated,
    AccountNotFound,
    DomainRuleError,
    InvalidUpgrade,
)
from enb_server.rewards import membership_rank, parse_membership_level

if TYPE_CHECKING:
    from enb_server.storage import AccountRepo, TransactionRepo

logger = logging.getLogger("account")

_WALLET_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

MAX_USERS_PAGE = 1000
MAX_TRANSACTIONS_PAGE = 200


def normalize_wallet(address: str) -> str:
    """Validate an EVM address and return its lower-cased form."""
    address = (address or "").strip()
    if not _WALLET_RE.match(address):
        raise DomainRuleError("Invalid wallet address")
    return address.lower()


def iso(ts: Optional[float]) -> Optional[str]:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def render_profile(acct: dict) -> dict:
    return {
        "walletAddress": acct["wallet_address"],
        "membershipLevel": acct["membership_level"],
        "enbBalance": acct["enb_balance"],
        "totalEarned": acct["total_earned"],
        "invitationCode": acct["invitation_code"],
        "maxInvitationUses": acct["max_invitation_uses"],
        "currentInvitationUses": acct["current_invitation_uses"],
        "isActivated": acct["is_activated"],
        "inviterWallet": acct["inviter_wallet"],
        "transactionHash": acct["transaction_hash"],
        "consecutiveDays": acct["consecutive_days"],
        "lastDailyClaimTime": iso(acct["last_daily_claim_time"]),
        "lastCheckIn": iso(acct["last_daily_claim_time"]),
        "createdAt": iso(acct["created_at"]),
        "activatedAt": iso(acct["activated_at"]),
        "updatedAt": iso(acct["updated_at"]),
    }


def render_transaction(tx: dict) -> dict:
    return {
        "id": tx["id"],
        "walletAddress": tx["wallet_address"],
        "type": tx["type"],
        "amount": tx["amount"],
        "balanceBefore": tx["balance_before"],
        "balanceAfter": tx["balance_after"],
        "description": tx["description"],
        "referenceId": tx["reference_id"],
        "timestamp": iso(tx["created_at"]),
    }


class AccountService:
    """Account lifecycle backed by SQLite via AccountRepo."""

    def __init__(
        self,
        repo: "AccountRepo",
        transactions: "TransactionRepo",
        default_max_uses: int = 5,
        clock: Callable[[], float] = time.time,
    ):
        self._repo = repo
        self._transactions = transactions
        self._default_max_uses = default_max_uses
        self._clock = clock

    async def require_account(self, wallet_address: str) -> dict:
        acct = await self._repo.get(wallet_address)
        if acct is None:
            raise AccountNotFound(wallet_address)
        return acct

    async def create_account(self, wallet_address: str, transaction_hash: str) -> dict:
        wallet = normalize_wallet(wallet_address)
        if not (transaction_hash or "").strip():
            raise DomainRuleError("Missing required fields")
        created = await self._repo.create(
            wallet, transaction_hash.strip(),
            max_uses=self._default_max_uses, now=self._clock(),
        )
        if not created:
            raise AccountExists(f"Account {wallet} already exists")
        logger.info("Created account %s tx=%s", wallet, transaction_hash)
        return render_profile(await self._repo.get(wallet))

    async def get_profile(self, wallet_address: str) -> dict:
        wallet = normalize_wallet(wallet_address)
        return render_profile(await self.require_account(wallet))

    async def list_users(
        self,
        membership_level: Optional[str] = None,
        is_activated: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> dict:
        level = parse_membership_level(membership_level).value if membership_level else None
        limit = clamp(limit, 1, MAX_USERS_PAGE)
        offset = max(offset, 0)
        rows = await self._repo.list_filtered(level, is_activated, limit=limit, offset=offset)
        total = await self._repo.count(level, is_activated)
        return {
            "users": [render_profile(r) for r in rows],
            "total": total,
            "limit": limit,
            "offset": offset,
        }

    async def update_balance(
        self, wallet_address: str, amount: float, tx_type: str, description: str = "",
    ) -> dict:
        wallet = normalize_wallet(wallet_address)
        if tx_type not in ("credit", "debit"):
            raise DomainRuleError("Type must be 'credit' or 'debit'")
        if amount is None or not math.isfinite(amount) or amount <= 0:
            raise DomainRuleError("Amount must be a positive number")
        result = await self._repo.adjust_balance(
            wallet, amount, tx_type, description=description or "", now=self._clock(),
        )
        return {
            "walletAddress": wallet,
            "type": tx_type,
            "amount": amount,
            "balanceBefore": result["balance_before"],
            "newBalance": result["balance_after"],
            "transactionId": result["transaction_id"],
        }

    async def list_transactions(self, wallet_address: str, limit: int = 20) -> dict:
        wallet = normalize_wallet(wallet_address)
        await self.require_account(wallet)
        rows = await self._transactions.list_for_wallet(wallet, limit=clamp(limit, 1, MAX_TRANSACTIONS_PAGE))
        return {
            "walletAddress": wallet,
            "transactions": [render_transaction(t) for t in rows],
        }

    async def update_membership(
        self, wallet_address: str, membership_level: str, transaction_hash: str,
    ) -> dict:
        wallet = normalize_wallet(wallet_address)
        level = parse_membership_level(membership_level)
        if not (transaction_hash or "").strip():
            raise DomainRuleError("Missing required fields")
        acct = await self.require_account(wallet)
        if not acct["is_activated"]:
            raise AccountNotActivated(f"Account {wallet} is not activated")
        if membership_rank(level) <= membership_rank(acct["membership_level"]):
            raise InvalidUpgrade(
                f"Cannot change membership from {acct['membership_level']} to {level.value}"
            )
        await self._repo.set_membership(wallet, level.value, now=self._clock())
        logger.info(
            "Upgraded %s membership %s -> %s tx=%s",
            wallet, acct["membership_level"], level.value, transaction_hash,
        )
        return render_profile(await self._repo.get(wallet))
