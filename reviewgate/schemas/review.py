"""Schemas for application review requests and responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from reviewgate.models.status import ApplicationStatus, ReviewAction


class AnswerItem(BaseModel):
    """One question/answer pair from the application form."""

    question: str
    answer: str


class SubmitRequest(BaseModel):
    """A completed application form."""

    guild_id: str = Field(..., description="Guild the applicant is joining")
    applicant_id: str = Field(..., description="Applicant user ID")
    answers: list[AnswerItem] = Field(default_factory=list)
    submitted_at_s: int | None = Field(
        default=None, description="Submission time; defaults to now"
    )


class ApplicationResponse(BaseModel):
    """Application with its current claim holder."""

    id: str
    guild_id: str
    applicant_id: str
    status: ApplicationStatus
    answers: list[AnswerItem]
    submitted_at_s: int
    short_code: str | None
    claimed_by: str | None = None
    claimed_at_s: int | None = None


class OpenApplicationsResponse(BaseModel):
    items: list[ApplicationResponse]
    total: int


class StaffRequest(BaseModel):
    """Identifies the staff member performing an action."""

    staff_id: str = Field(..., description="Staff user ID")


class ClaimResult(BaseModel):
    application_id: str
    staff_id: str
    status: ApplicationStatus
    claimed_at_s: int
    action_id: int


class UnclaimResult(BaseModel):
    application_id: str
    staff_id: str
    status: ApplicationStatus
    action_id: int
    released_holder: str
    forced: bool = False


class DecisionRequest(BaseModel):
    """A staff decision on a claimed application."""

    staff_id: str = Field(..., description="Staff user ID")
    action: ReviewAction = Field(..., description="approve, reject, need_info, kick or perm_reject")
    reason: str | None = Field(default=None, description="Reason shown to the applicant")
    expected_status: ApplicationStatus | None = Field(
        default=None, description="Status the caller last saw; mismatch fails as stale"
    )
    guild_name: str | None = Field(default=None, description="Name used in the message")
    meta: dict[str, Any] | None = Field(
        default=None, description="Extra audit context, e.g. scorer aggregate"
    )


class NotificationReport(BaseModel):
    delivered: bool
    error: str | None = None


class DecisionOutcome(BaseModel):
    """Committed decision, with any non-fatal delivery warning."""

    application_id: str
    action: ReviewAction
    prior_status: ApplicationStatus
    status: ApplicationStatus
    action_id: int
    claim_released: bool
    notification: NotificationReport | None = None
    warning: str | None = None


class CopyUidResult(BaseModel):
    application_id: str
    applicant_id: str
    action_id: int


class ActionLogItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: ReviewAction
    actor_id: str
    created_at_s: int
    meta: dict[str, Any] | None = None


class HistoryResponse(BaseModel):
    application_id: str
    actions: list[ActionLogItem]


class LookupResponse(BaseModel):
    """Application found by short code, with its latest actions."""

    code: str
    application: ApplicationResponse
    recent_actions: list[ActionLogItem]
