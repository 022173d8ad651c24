"""Schemas for review analytics."""

from pydantic import BaseModel


class DurationMetric(BaseModel):
    """Average duration over a window; ``seconds`` is None when there were no samples."""

    seconds: int | None
    display: str
    window_start_s: int
    window_end_s: int


class ModeratorStats(BaseModel):
    actor_id: str
    total: int
    approvals: int
    rejections: int
    need_info: int
    perm_reject: int
    kicks: int
    avg_claim_to_decision_s: int | None = None


class LeaderboardResponse(BaseModel):
    window_start_s: int
    window_end_s: int
    moderators: list[ModeratorStats]
