"""Routing cache for open modmail threads.

The ``modmail_thread`` table is authoritative. The in-memory set exists so the
message hot path can answer "is this thread open?" without a query, and is
rebuilt from the table with ``hydrate``.
"""

import logging

from sqlalchemy import select

from reviewgate.core.exceptions import NotFoundError
from reviewgate.core.storage import Database
from reviewgate.models.modmail import THREAD_CLOSED, THREAD_OPEN, ModmailThread
from reviewgate.utils.time import now_s

logger = logging.getLogger(__name__)


class ModmailThreadCache:
    """Set of thread ids currently open."""

    def __init__(self):
        self._open: set[str] = set()
        self.hydrated = False

    async def hydrate(self, db: Database) -> int:
        """Replace the cached set with every thread the database holds as open."""
        async with db.session() as session:
            result = await session.execute(
                select(ModmailThread.thread_id).where(ModmailThread.status == THREAD_OPEN)
            )
            thread_ids = set(result.scalars().all())

        self._open = thread_ids
        self.hydrated = True
        logger.info(f"Modmail cache hydrated with {len(thread_ids)} open thread(s)")
        return len(thread_ids)

    def mark_open(self, thread_id: str) -> None:
        self._open.add(thread_id)

    def mark_closed(self, thread_id: str) -> None:
        self._open.discard(thread_id)

    def is_open(self, thread_id: str) -> bool:
        return thread_id in self._open

    def __len__(self) -> int:
        return len(self._open)


class ModmailThreadStore:
    """Persists thread lifecycle and keeps the cache in step with it."""

    def __init__(self, db: Database, cache: ModmailThreadCache):
        self.db = db
        self.cache = cache

    async def open(
        self, thread_id: str, guild_id: str, application_id: str | None = None
    ) -> ModmailThread:
        """Open a thread, or reopen a closed one with the same id."""
        async with self.db.transaction() as session:
            thread = await session.get(ModmailThread, thread_id)
            if thread is None:
                thread = ModmailThread(
                    thread_id=thread_id,
                    guild_id=guild_id,
                    application_id=application_id,
                    status=THREAD_OPEN,
                    opened_at_s=now_s(),
                )
                session.add(thread)
                action = "opened"
            else:
                thread.status = THREAD_OPEN
                thread.opened_at_s = now_s()
                thread.closed_at_s = None
                if application_id is not None:
                    thread.application_id = application_id
                action = "reopened"

        self.cache.mark_open(thread_id)
        logger.info(f"Modmail thread {thread_id} {action} in guild {guild_id}")
        return thread

    async def close(self, thread_id: str) -> ModmailThread:
        async with self.db.transaction() as session:
            thread = await session.get(ModmailThread, thread_id)
            if thread is None:
                raise NotFoundError("Modmail thread", thread_id)
            thread.status = THREAD_CLOSED
            thread.closed_at_s = now_s()

        self.cache.mark_closed(thread_id)
        logger.info(f"Modmail thread {thread_id} closed")
        return thread

    async def reopen(self, thread_id: str) -> ModmailThread:
        async with self.db.session() as session:
            thread = await session.get(ModmailThread, thread_id)
        if thread is None:
            raise NotFoundError("Modmail thread", thread_id)
        return await self.open(thread_id, thread.guild_id)


# Global routing cache
open_threads = ModmailThreadCache()
