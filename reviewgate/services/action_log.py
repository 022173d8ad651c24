"""Append-only audit trail of staff actions."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reviewgate.core.exceptions import NotFoundError
from reviewgate.core.storage import Database
from reviewgate.models.action_log import ActionLogEntry
from reviewgate.models.application import Application
from reviewgate.models.status import ReviewAction
from reviewgate.utils.time import now_s

logger = logging.getLogger(__name__)


class ActionLog:
    """Reads and appends audit entries.

    ``append`` joins the caller's transaction and is only used by the claim
    guard and the decision executor. Entries are never deleted; ``meta`` is the
    one field that may be filled in after the fact.
    """

    def __init__(self, db: Database):
        self.db = db

    async def append(
        self,
        session: AsyncSession,
        application: Application,
        actor_id: str,
        action: ReviewAction,
        meta: dict[str, Any] | None = None,
        created_at_s: int | None = None,
    ) -> ActionLogEntry:
        """Add an entry inside the caller's open transaction."""
        entry = ActionLogEntry(
            guild_id=application.guild_id,
            application_id=application.id,
            actor_id=actor_id,
            action=ReviewAction(action),
            created_at_s=created_at_s if created_at_s is not None else now_s(),
            meta=meta or None,
        )
        session.add(entry)
        await session.flush()
        return entry

    async def recent_for(
        self, application_id: str, limit: int | None = None
    ) -> list[ActionLogEntry]:
        """Return every action on an application, newest first."""
        query = (
            select(ActionLogEntry)
            .where(ActionLogEntry.application_id == application_id)
            .order_by(ActionLogEntry.created_at_s.desc(), ActionLogEntry.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        async with self.db.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def history_for(self, application_id: str) -> list[ActionLogEntry]:
        """Return the full decision history in commit order."""
        query = (
            select(ActionLogEntry)
            .where(ActionLogEntry.application_id == application_id)
            .order_by(ActionLogEntry.created_at_s.asc(), ActionLogEntry.id.asc())
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def backfill_meta(self, entry_id: int, meta: dict[str, Any]) -> ActionLogEntry:
        """Merge ``meta`` into an existing entry's meta."""
        async with self.db.transaction() as session:
            entry = await session.get(ActionLogEntry, entry_id)
            if entry is None:
                raise NotFoundError("Action log entry", str(entry_id))
            # Reassign so the JSON column is flagged dirty.
            entry.meta = {**(entry.meta or {}), **meta}
        logger.debug(f"Backfilled meta on action log entry {entry_id}: {sorted(meta)}")
        return entry
