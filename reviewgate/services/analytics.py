"""Timing metrics derived from the action log.

All durations are integer seconds. Means are truncated, and an empty sample
set yields None rather than zero.
"""

import logging

from sqlalchemy import case, func, select
from sqlalchemy.orm import aliased

from reviewgate.core.storage import Database
from reviewgate.models.action_log import ActionLogEntry
from reviewgate.models.application import Application
from reviewgate.models.status import DECISION_ACTIONS, TERMINAL_DECISIONS, ReviewAction
from reviewgate.schemas.analytics import ModeratorStats
from reviewgate.utils.time import now_s

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


def window_start(days: int, now: int | None = None) -> int:
    """Start of a window covering the last ``days`` days."""
    return (now if now is not None else now_s()) - days * SECONDS_PER_DAY


def format_duration(seconds: int | None) -> str:
    """Render seconds as "14m" or "1h 12m"; minutes are truncated."""
    if seconds is None or seconds < 0:
        return "—"
    hours, remainder = divmod(int(seconds), 3600)
    minutes = remainder // 60
    if hours == 0:
        return f"{minutes}m"
    return f"{hours}h {minutes}m"


def _truncated_mean(deltas: list[int]) -> int | None:
    # Same-second pairs carry no timing information.
    deltas = [delta for delta in deltas if delta > 0]
    if not deltas:
        return None
    return sum(deltas) // len(deltas)


class AnalyticsAggregator:
    """Aggregates claim and queue latency from the action log."""

    def __init__(self, db: Database):
        self.db = db

    async def avg_claim_to_decision(
        self,
        guild_id: str,
        staff_id: str,
        window_start_s: int,
        window_end_s: int | None = None,
    ) -> int | None:
        """Mean time from a staff member's claim to their closing decision.

        Each terminal decision in the window is paired with the same actor's
        latest claim on that application strictly before the decision. Decisions
        without such a claim, and zero-length pairs, are left out.
        """
        window_end_s = window_end_s if window_end_s is not None else now_s()
        decision = aliased(ActionLogEntry)
        claim = aliased(ActionLogEntry)

        claimed_at = (
            select(func.max(claim.created_at_s))
            .where(
                claim.guild_id == decision.guild_id,
                claim.application_id == decision.application_id,
                claim.actor_id == decision.actor_id,
                claim.action == ReviewAction.CLAIM,
                claim.created_at_s < decision.created_at_s,
            )
            .correlate(decision)
            .scalar_subquery()
        )
        query = select(decision.created_at_s, claimed_at).where(
            decision.guild_id == guild_id,
            decision.actor_id == staff_id,
            decision.action.in_(sorted(TERMINAL_DECISIONS)),
            decision.created_at_s >= window_start_s,
            decision.created_at_s <= window_end_s,
        )

        async with self.db.session() as session:
            rows = (await session.execute(query)).all()

        deltas = [decided - claimed for decided, claimed in rows if claimed is not None]
        return _truncated_mean(deltas)

    async def avg_submit_to_first_claim(
        self,
        guild_id: str,
        window_start_s: int,
        window_end_s: int | None = None,
    ) -> int | None:
        """Mean time from submission to the first claim, across the guild.

        Covers applications submitted in the window that have been claimed.
        """
        window_end_s = window_end_s if window_end_s is not None else now_s()
        first_claim = (
            select(
                ActionLogEntry.application_id.label("application_id"),
                func.min(ActionLogEntry.created_at_s).label("claimed_at_s"),
            )
            .where(
                ActionLogEntry.guild_id == guild_id,
                ActionLogEntry.action == ReviewAction.CLAIM,
            )
            .group_by(ActionLogEntry.application_id)
            .subquery()
        )
        query = (
            select(Application.submitted_at_s, first_claim.c.claimed_at_s)
            .join(first_claim, first_claim.c.application_id == Application.id)
            .where(
                Application.guild_id == guild_id,
                Application.submitted_at_s >= window_start_s,
                Application.submitted_at_s <= window_end_s,
                first_claim.c.claimed_at_s > Application.submitted_at_s,
            )
        )

        async with self.db.session() as session:
            rows = (await session.execute(query)).all()

        return _truncated_mean([claimed - submitted for submitted, claimed in rows])

    async def leaderboard(
        self,
        guild_id: str,
        window_start_s: int,
        window_end_s: int | None = None,
        limit: int = 100,
    ) -> list[ModeratorStats]:
        """Decision counts per staff member, busiest first."""
        window_end_s = window_end_s if window_end_s is not None else now_s()
        action = ActionLogEntry.action

        def count_of(kind: ReviewAction):
            return func.sum(case((action == kind, 1), else_=0))

        query = (
            select(
                ActionLogEntry.actor_id,
                func.count().label("total"),
                count_of(ReviewAction.APPROVE).label("approvals"),
                count_of(ReviewAction.REJECT).label("rejections"),
                count_of(ReviewAction.NEED_INFO).label("need_info"),
                count_of(ReviewAction.PERM_REJECT).label("perm_reject"),
                count_of(ReviewAction.KICK).label("kicks"),
            )
            .where(
                ActionLogEntry.guild_id == guild_id,
                action.in_(sorted(DECISION_ACTIONS)),
                ActionLogEntry.created_at_s >= window_start_s,
                ActionLogEntry.created_at_s <= window_end_s,
            )
            .group_by(ActionLogEntry.actor_id)
            .order_by(func.count().desc(), count_of(ReviewAction.APPROVE).desc())
            .limit(limit)
        )

        async with self.db.session() as session:
            rows = (await session.execute(query)).all()

        stats = []
        for row in rows:
            avg = await self.avg_claim_to_decision(
                guild_id, row.actor_id, window_start_s, window_end_s
            )
            stats.append(
                ModeratorStats(
                    actor_id=row.actor_id,
                    total=row.total,
                    approvals=row.approvals or 0,
                    rejections=row.rejections or 0,
                    need_info=row.need_info or 0,
                    perm_reject=row.perm_reject or 0,
                    kicks=row.kicks or 0,
                    avg_claim_to_decision_s=avg,
                )
            )
        logger.debug(f"Leaderboard for guild {guild_id}: {len(stats)} moderators")
        return stats
