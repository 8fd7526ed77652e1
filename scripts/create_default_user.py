#!/usr/bin/env python3
"""Seed the default inviter account so the first users have a code to redeem."""

import argparse
import asyncio
import os

from enb_server.config import Settings
from enb_server.invitation import InvitationService
from enb_server.storage import StorageManager

DEFAULT_WALLET = "0x1234567890abcdef1234567890abcdef12345678"
DEFAULT_CODE = "ENB2025"


async def seed(db_path: str, wallet: str, code: str, max_uses: int, default_max_uses: int):
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    storage = StorageManager(db_path)
    await storage.initialize()
    try:
        service = InvitationService(
            storage.accounts, storage.invitations,
            default_max_uses=default_max_uses, seed_max_uses=max_uses,
        )
        profile = await service.create_default_user(wallet, code, max_uses)
    finally:
        await storage.close()
    print("Default user ready:")
    print(f"  Wallet address:  {profile['walletAddress']}")
    print(f"  Invitation code: {profile['invitationCode']}")
    print(f"  Uses:            {profile['currentInvitationUses']}/{profile['maxInvitationUses']}")


def main():
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Create the default inviter account")
    parser.add_argument("--db-path", default=settings.db_path)
    parser.add_argument("--wallet", default=DEFAULT_WALLET)
    parser.add_argument("--code", default=DEFAULT_CODE)
    parser.add_argument("--max-uses", type=int, default=settings.seed_max_uses)
    args = parser.parse_args()
    asyncio.run(seed(args.db_path, args.wallet, args.code, args.max_uses, settings.default_max_uses))


if __name__ == "__main__":
    main()
