"""Per-guild kill switch for review operations.

The database row is the persisted state; the in-memory map answers the hot
``is_active`` check and is rebuilt by ``hydrate`` on startup.
"""

import logging

from sqlalchemy import select

from reviewgate.core.storage import Database
from reviewgate.models.guild import GuildReviewState
from reviewgate.utils.time import now_s

logger = logging.getLogger(__name__)


class PanicSwitch:
    """Cached view of which guilds have review operations suspended."""

    def __init__(self):
        self._active: dict[str, bool] = {}

    async def hydrate(self, db: Database) -> int:
        """Load every guild currently in panic mode."""
        async with db.session() as session:
            result = await session.execute(
                select(GuildReviewState.guild_id).where(GuildReviewState.panic_mode)
            )
            guild_ids = list(result.scalars().all())

        self._active = {guild_id: True for guild_id in guild_ids}
        if guild_ids:
            logger.warning(
                f"Restored panic mode for {len(guild_ids)} guild(s): {', '.join(guild_ids)}"
            )
        else:
            logger.info("No guilds in panic mode")
        return len(guild_ids)

    def is_active(self, guild_id: str) -> bool:
        return self._active.get(guild_id, False)

    async def set(
        self, db: Database, guild_id: str, enabled: bool, actor_id: str | None = None
    ) -> None:
        """Persist the switch and update the cache."""
        async with db.transaction() as session:
            state = await session.get(GuildReviewState, guild_id)
            if state is None:
                state = GuildReviewState(guild_id=guild_id)
                session.add(state)
            state.panic_mode = enabled
            state.panic_enabled_at_s = now_s() if enabled else None
            state.panic_enabled_by = actor_id if enabled else None

        self._active[guild_id] = enabled
        if enabled:
            logger.warning(f"Panic mode enabled for guild {guild_id} by {actor_id}")
        else:
            logger.info(f"Panic mode disabled for guild {guild_id} by {actor_id}")


# Global panic switch instance
panic_switch = PanicSwitch()
