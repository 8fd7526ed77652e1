import logging
from typing import Optional

import aiosqlite

from ._migrate import run_migrations
from ._tx import Transactor
from .accounts import AccountRepo
from .invitations import InvitationRepo
from .transactions import TransactionRepo

logger = logging.getLogger("storage")


class StorageManager:
    """Top-level manager: opens the database, runs migrations, exposes repos."""

    def __init__(self, db_path: str = "enb.db"):
        self.db_path = db_path
        self._db: Optional[aiosqlite.Connection] = None
        self._tx: Optional[Transactor] = None
        self.accounts: Optional[AccountRepo] = None
        self.invitations: Optional[InvitationRepo] = None
        self.transactions: Optional[TransactionRepo] = None

    async def initialize(self):
        self._db = await aiosqlite.connect(self.db_path)
        await self._db.execute("PRAGMA journal_mode=WAL")
        await self._db.execute("PRAGMA foreign_keys=ON")
        await run_migrations(self._db, logger)

        self._tx = Transactor(self._db)
        self.accounts = AccountRepo(self._db, self._tx)
        self.invitations = InvitationRepo(self._db, self._tx)
        self.transactions = TransactionRepo(self._db)

        logger.info("Storage initialized: %s", self.db_path)

    async def close(self):
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Storage closed")
