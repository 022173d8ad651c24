"""Pytest configuration and fixtures."""

import asyncio
import os

import pytest
import pytest_asyncio

# Set test environment variables before importing reviewgate modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["STALE_MONITOR_ENABLED"] = "false"
os.environ["NOTIFY_WEBHOOK_URL"] = ""
os.environ.setdefault("LOG_LEVEL", "WARNING")

from reviewgate.core.storage import create_database  # noqa: E402
from reviewgate.services.application_store import ApplicationStore  # noqa: E402
from reviewgate.services.claim_guard import ClaimGuard  # noqa: E402
from reviewgate.services.decision_executor import DecisionExecutor  # noqa: E402
from reviewgate.services.notify.base import (  # noqa: E402
    NotificationResult,
    Notice,
    Notifier,
)
from reviewgate.services.panic import PanicSwitch  # noqa: E402

GUILD_ID = "guild-1"


class RecordingNotifier(Notifier):
    """Accepts every notice and keeps it for inspection."""

    def __init__(self, result: NotificationResult | None = None):
        self.sent: list[Notice] = []
        self.result = result or NotificationResult(delivered=True)

    async def deliver(self, notice: Notice) -> NotificationResult:
        self.sent.append(notice)
        return self.result


class RaisingNotifier(Notifier):
    """Simulates a chat gateway that is down."""

    async def deliver(self, notice: Notice) -> NotificationResult:
        raise ConnectionError("gateway unreachable")


class HangingNotifier(Notifier):
    """Never answers within the executor's timeout."""

    async def deliver(self, notice: Notice) -> NotificationResult:
        await asyncio.sleep(10)
        return NotificationResult(delivered=True)


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database per test."""
    database = create_database("sqlite+aiosqlite://")
    await database.init_models()
    yield database
    await database.dispose()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def panic():
    """Panic switch isolated from the process-wide instance."""
    return PanicSwitch()


@pytest.fixture
def store(db, panic):
    return ApplicationStore(db, panic=panic)


@pytest.fixture
def guard(db, panic):
    return ClaimGuard(db, panic=panic)


@pytest.fixture
def executor(db, notifier):
    return DecisionExecutor(db, notifier, notify_timeout=0.5)


@pytest.fixture
def sample_answers():
    """Sample application form answers."""
    return [
        {"question": "How did you find us?", "answer": "A friend invited me"},
        {"question": "Why do you want to join?", "answer": "To talk about synths"},
    ]


@pytest_asyncio.fixture
async def pending_app(store, sample_answers):
    """A freshly submitted application."""
    return await store.submit(GUILD_ID, "applicant-1", sample_answers)


@pytest_asyncio.fixture
async def claimed_app(pending_app, guard):
    """An application claimed by staff-a."""
    await guard.claim(pending_app.id, "staff-a")
    return pending_app
