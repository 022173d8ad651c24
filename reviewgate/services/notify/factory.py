"""Factory for creating the configured notifier."""

from reviewgate.core.config import settings
from reviewgate.services.notify.base import Notifier
from reviewgate.services.notify.providers import LogOnlyNotifier, WebhookNotifier


def get_notifier() -> Notifier:
    """Get the configured notification channel."""
    if settings.notify_webhook_url:
        return WebhookNotifier(
            url=settings.notify_webhook_url,
            timeout=settings.notify_timeout_seconds,
        )
    return LogOnlyNotifier()
