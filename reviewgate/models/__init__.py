"""Database models."""

from reviewgate.models.action_log import ActionLogEntry
from reviewgate.models.application import Application, ReviewClaim
from reviewgate.models.guild import GuildReviewState
from reviewgate.models.modmail import ModmailThread
from reviewgate.models.short_code import ShortCodeIndex
from reviewgate.models.status import ApplicationStatus, ReviewAction

__all__ = [
    "ActionLogEntry",
    "Application",
    "ApplicationStatus",
    "GuildReviewState",
    "ModmailThread",
    "ReviewAction",
    "ReviewClaim",
    "ShortCodeIndex",
]
