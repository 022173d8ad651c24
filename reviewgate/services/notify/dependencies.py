"""FastAPI dependencies for notification channels."""

from collections.abc import AsyncGenerator

from reviewgate.services.notify.base import Notifier
from reviewgate.services.notify.factory import get_notifier


async def notifier_dep() -> AsyncGenerator[Notifier, None]:
    """Dependency for the configured notifier, closed after the request."""
    notifier = get_notifier()
    try:
        yield notifier
    finally:
        await notifier.close()
