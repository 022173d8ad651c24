"""Base class for notification channels."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Notice:
    """A message addressed to an applicant or to a guild's staff."""

    guild_id: str
    recipient_id: str | None
    content: str
    kind: str
    context: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationResult:
    """Outcome of one delivery attempt."""

    delivered: bool
    error: str | None = None


class Notifier(ABC):
    """Abstract base class for notification channels."""

    @abstractmethod
    async def deliver(self, notice: Notice) -> NotificationResult:
        """Deliver a notice.

        Args:
            notice: Message and routing information

        Returns:
            Whether the channel accepted the message, with a reason when not
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the channel."""
        return None
