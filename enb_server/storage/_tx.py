import asyncio
from contextlib import asynccontextmanager

import aiosqlite


class Transactor:
    """Runs write transactions on a shared connection one at a time.

    Every repo that writes goes through the same Transactor, so statements
    from concurrent handlers never land inside each other's transaction.
    """

    def __init__(self, db: aiosqlite.Connection):
        self._db = db
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def immediate(self):
        async with self._lock:
            await self._db.execute("BEGIN IMMEDIATE")
            try:
                yield self._db
            except BaseException:
                await self._db.rollback()
                raise
            await self._db.commit()
