"""API routes for review timing metrics."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from reviewgate.core.config import settings
from reviewgate.core.storage import Database, get_database
from reviewgate.schemas.analytics import DurationMetric, LeaderboardResponse
from reviewgate.services.analytics import (
    AnalyticsAggregator,
    format_duration,
    window_start,
)
from reviewgate.utils.time import now_s

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


async def get_analytics(db: Database = Depends(get_database)) -> AnalyticsAggregator:
    return AnalyticsAggregator(db)


def _window(days: int | None) -> tuple[int, int]:
    end = now_s()
    return window_start(days or settings.analytics_default_window_days, end), end


@router.get("/claim-to-decision", response_model=DurationMetric)
async def claim_to_decision(
    guild_id: str,
    staff_id: str,
    days: int | None = Query(default=None, ge=1, le=365),
    analytics: AnalyticsAggregator = Depends(get_analytics),
):
    """Average time a staff member takes from claim to final decision."""
    start, end = _window(days)
    try:
        seconds = await analytics.avg_claim_to_decision(guild_id, staff_id, start, end)
    except SQLAlchemyError as e:
        logger.error(f"Database error computing claim-to-decision: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return DurationMetric(
        seconds=seconds,
        display=format_duration(seconds),
        window_start_s=start,
        window_end_s=end,
    )


@router.get("/submit-to-first-claim", response_model=DurationMetric)
async def submit_to_first_claim(
    guild_id: str,
    days: int | None = Query(default=None, ge=1, le=365),
    analytics: AnalyticsAggregator = Depends(get_analytics),
):
    """Average time applications wait for their first claim."""
    start, end = _window(days)
    try:
        seconds = await analytics.avg_submit_to_first_claim(guild_id, start, end)
    except SQLAlchemyError as e:
        logger.error(f"Database error computing submit-to-first-claim: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return DurationMetric(
        seconds=seconds,
        display=format_duration(seconds),
        window_start_s=start,
        window_end_s=end,
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    guild_id: str,
    days: int | None = Query(default=None, ge=1, le=365),
    limit: int = Query(default=100, ge=1, le=500),
    analytics: AnalyticsAggregator = Depends(get_analytics),
):
    """Decision counts per staff member."""
    start, end = _window(days)
    try:
        moderators = await analytics.leaderboard(guild_id, start, end, limit=limit)
    except SQLAlchemyError as e:
        logger.error(f"Database error building leaderboard: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return LeaderboardResponse(
        window_start_s=start, window_end_s=end, moderators=moderators
    )
