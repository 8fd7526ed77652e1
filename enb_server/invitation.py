"""
invitation.py - Invitation-code activation.

A new account becomes active by redeeming the invitation code of an already
activated member. Each code has a usage ceiling (5 by default, higher for
seeded accounts); redemption bumps the inviter's counter, activates the
invitee, hands the invitee a code of its own and logs the usage, all in one
transaction.
"""

import logging
import secrets
import string
import time
from typing import TYPE_CHECKING, Callable, Optional

from enb_server.account import iso, normalize_wallet, render_profile
from enb_server.errors import (
    AccountNotFound,
    AlreadyActivated,
    CodeTaken,
    DomainRuleError,
    DuplicateUsage,
    InvalidCode,
    InvitationCodeNotFound,
    InviterNotActivated,
    SelfInvitation,
    UsageLimitExceeded,
)

if TYPE_CHECKING:
    from enb_server.storage import AccountRepo, InvitationRepo

logger = logging.getLogger("invitation")

CODE_LENGTH = 8
CODE_ALPHABET = string.ascii_uppercase + string.digits
RATE_WINDOW_SEC = 86400
MAX_CODE_ATTEMPTS = 10


def generate_invitation_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


class InvitationService:
    """Activation by invitation code, default-inviter seeding and usage lookups."""

    def __init__(
        self,
        accounts: "AccountRepo",
        invitations: "InvitationRepo",
        default_max_uses: int = 5,
        seed_max_uses: int = 105,
        clock: Callable[[], float] = time.time,
    ):
        self._accounts = accounts
        self._invitations = invitations
        self.default_max_uses = default_max_uses
        self.seed_max_uses = seed_max_uses
        self._clock = clock

    async def _new_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_invitation_code()
            if await self._accounts.get_by_invitation_code(code) is None:
                return code
        raise RuntimeError("Could not allocate a unique invitation code")

    async def activate(self, wallet_address: str, invitation_code: str) -> dict:
        wallet = normalize_wallet(wallet_address)
        code = (invitation_code or "").strip()
        if not code:
            raise DomainRuleError("Missing required fields")

        invitee = await self._accounts.get(wallet)
        if invitee is None:
            raise AccountNotFound(wallet)
        if invitee["is_activated"]:
            raise AlreadyActivated(f"Account {wallet} is already activated")

        inviter = await self._accounts.get_by_invitation_code(code)
        if inviter is None:
            raise InvalidCode("Invalid invitation code")
        if inviter["wallet_address"] == wallet:
            raise SelfInvitation("Cannot use your own invitation code")
        if not inviter["is_activated"]:
            raise InviterNotActivated("Inviter account is not activated")
        if inviter["current_invitation_uses"] >= inviter["max_invitation_uses"]:
            logger.warning(
                "Invitation code %s exhausted (%d/%d), rejected %s",
                code, inviter["current_invitation_uses"], inviter["max_invitation_uses"], wallet,
            )
            raise UsageLimitExceeded(f"Invitation code {code} has reached its usage limit")
        if await self._invitations.has_usage(code, wallet):
            raise DuplicateUsage(f"Invitation code {code} was already used by {wallet}")

        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            own_code = await self._new_code()
            try:
                result = await self._invitations.redeem(
                    invitation_code=code,
                    invitee=wallet,
                    inviter=inviter["wallet_address"],
                    new_code=own_code,
                    new_code_max_uses=self.default_max_uses,
                    now=self._clock(),
                )
                break
            except CodeTaken:
                if attempt == MAX_CODE_ATTEMPTS:
                    raise
                logger.warning("Generated code %s was taken concurrently, retrying", own_code)

        logger.info(
            "Activated %s with code %s from %s (%d/%d used)",
            wallet, code, inviter["wallet_address"], result["current_uses"], result["max_uses"],
        )
        acct = await self._accounts.get(wallet)
        return {
            "message": "Account activated successfully",
            "walletAddress": wallet,
            "membershipLevel": acct["membership_level"],
            "invitationCode": acct["invitation_code"],
            "inviterWallet": inviter["wallet_address"],
            "remainingUses": result["max_uses"] - result["current_uses"],
            "activatedAt": iso(result["activated_at"]),
        }

    async def create_default_user(
        self, wallet_address: str, invitation_code: str, max_uses: Optional[int] = None,
    ) -> dict:
        """Seed an activated inviter account; safe to run repeatedly."""
        wallet = normalize_wallet(wallet_address)
        code = (invitation_code or "").strip()
        if not code:
            raise DomainRuleError("Missing required fields")
        max_uses = self.seed_max_uses if max_uses is None else max_uses
        if max_uses < 1:
            raise DomainRuleError("maxUses must be at least 1")
        holder = await self._accounts.get_by_invitation_code(code)
        if holder is not None and holder["wallet_address"] != wallet:
            raise CodeTaken(f"Invitation code {code} is already assigned")
        acct = await self._accounts.upsert_seeded(wallet, code, max_uses, now=self._clock())
        logger.info("Seeded default user %s code=%s max_uses=%d", wallet, code, acct["max_invitation_uses"])
        return render_profile(acct)

    async def get_usage(self, invitation_code: str, limit: int = 100) -> dict:
        code = (invitation_code or "").strip()
        inviter = await self._accounts.get_by_invitation_code(code)
        if inviter is None:
            raise InvitationCodeNotFound(code)
        usages = await self._invitations.list_for_code(code, limit=limit)
        recent = await self._invitations.count_since(code, self._clock() - RATE_WINDOW_SEC)
        return {
            "invitationCode": code,
            "inviterWallet": inviter["wallet_address"],
            "currentUses": inviter["current_invitation_uses"],
            "maxUses": inviter["max_invitation_uses"],
            "remainingUses": inviter["max_invitation_uses"] - inviter["current_invitation_uses"],
            "usedLast24h": recent,
            "usages": [
                {
                    "usedBy": u["used_by"],
                    "usedAt": iso(u["used_at"]),
                    "inviterWallet": u["inviter_wallet"],
                }
                for u in usages
            ],
        }
