"""Notification channel implementations."""

import logging

import httpx

from reviewgate.services.notify.base import NotificationResult, Notice, Notifier

logger = logging.getLogger(__name__)


class WebhookNotifier(Notifier):
    """Posts notices as JSON to a webhook that relays them to the chat platform."""

    def __init__(self, url: str, timeout: float = 15.0):
        self.url = url
        self.client = httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def deliver(self, notice: Notice) -> NotificationResult:
        payload = {
            "guild_id": notice.guild_id,
            "recipient_id": notice.recipient_id,
            "kind": notice.kind,
            "content": notice.content,
            "context": notice.context,
        }
        try:
            response = await self.client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"Notification to {notice.recipient_id} timed out: {e}")
            return NotificationResult(delivered=False, error="notification timed out")
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Notification to {notice.recipient_id} rejected: "
                f"HTTP {e.response.status_code}"
            )
            return NotificationResult(
                delivered=False, error=f"HTTP {e.response.status_code}"
            )
        except httpx.RequestError as e:
            logger.warning(f"Notification to {notice.recipient_id} failed: {e}")
            return NotificationResult(delivered=False, error=f"Network error: {e}")

        logger.info(f"Delivered {notice.kind} notice to {notice.recipient_id}")
        return NotificationResult(delivered=True)

    async def close(self) -> None:
        await self.client.aclose()


class LogOnlyNotifier(Notifier):
    """Used when no channel is configured; records the notice and reports it undelivered."""

    async def deliver(self, notice: Notice) -> NotificationResult:
        logger.info(
            f"No notification channel configured; {notice.kind} notice for "
            f"{notice.recipient_id} not sent"
        )
        return NotificationResult(
            delivered=False, error="no notification channel configured"
        )
