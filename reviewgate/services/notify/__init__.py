"""Notification channels."""

from reviewgate.services.notify.base import NotificationResult, Notice, Notifier
from reviewgate.services.notify.factory import get_notifier
from reviewgate.services.notify.messages import render_decision_message

__all__ = [
    "NotificationResult",
    "Notice",
    "Notifier",
    "get_notifier",
    "render_decision_message",
]
