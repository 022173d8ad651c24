"""Periodic staff alerts for applications nobody has picked up."""

import logging
from collections import defaultdict

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from reviewgate.core.config import settings
from reviewgate.core.storage import Database
from reviewgate.models.application import Application
from reviewgate.services.application_store import ApplicationStore
from reviewgate.services.notify.base import Notice, Notifier
from reviewgate.utils.time import now_s

logger = logging.getLogger(__name__)

JOB_ID = "stale_applications"


def render_stale_alert(applications: list[Application], max_listed: int) -> str:
    """Staff-facing summary of waiting applications."""
    count = len(applications)
    noun = "application has" if count == 1 else "applications have"
    lines = [
        f"{count} {noun} been waiting more than "
        f"{settings.stale_threshold_hours}h without a reviewer."
    ]
    for application in applications[:max_listed]:
        waited_h = (now_s() - application.submitted_at_s) // 3600
        lines.append(f"- {application.short_code or application.id} ({waited_h}h)")
    if count > max_listed:
        lines.append(f"...and {count - max_listed} more")
    return "\n".join(lines)


class StaleApplicationMonitor:
    """Interval job that alerts staff about stale pending applications."""

    def __init__(self, db: Database | None = None, notifier: Notifier | None = None):
        self.db = db
        self.notifier = notifier
        self._scheduler: AsyncIOScheduler | None = None

    def configure(self, db: Database, notifier: Notifier) -> None:
        self.db = db
        self.notifier = notifier

    async def start(self):
        """Start the scheduler with the check job."""
        if self._scheduler is not None and self._scheduler.running:
            logger.info("Stale monitor already running")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(minutes=settings.stale_check_interval_minutes),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(
            f"Stale monitor started (every {settings.stale_check_interval_minutes} min, "
            f"threshold {settings.stale_threshold_hours}h)"
        )

    async def stop(self):
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Stale monitor stopped")

    async def run_once(self) -> int:
        """Alert each guild about its stale applications.

        Returns:
            Number of applications marked as alerted
        """
        if self.db is None or self.notifier is None:
            logger.warning("Stale monitor not configured, skipping run")
            return 0

        store = ApplicationStore(self.db)
        cutoff = now_s() - settings.stale_threshold_hours * 3600
        try:
            stale = await store.list_stale(cutoff)
        except SQLAlchemyError as e:
            logger.error(f"Failed to query stale applications: {e}")
            return 0

        by_guild: dict[str, list[Application]] = defaultdict(list)
        for application in stale:
            by_guild[application.guild_id].append(application)

        alerted = 0
        for guild_id, applications in by_guild.items():
            notice = Notice(
                guild_id=guild_id,
                recipient_id=None,
                content=render_stale_alert(applications, settings.stale_max_apps_per_alert),
                kind="stale_alert",
                context={"application_ids": [a.id for a in applications]},
            )
            try:
                result = await self.notifier.deliver(notice)
            except Exception as e:
                logger.warning(f"Stale alert for guild {guild_id} failed: {e!r}")
                continue
            if not result.delivered:
                logger.warning(
                    f"Stale alert for guild {guild_id} not delivered: {result.error}"
                )
                continue
            await store.mark_stale_alerted([a.id for a in applications])
            alerted += len(applications)
            logger.info(f"Alerted guild {guild_id} about {len(applications)} stale application(s)")

        return alerted

    def get_status(self) -> dict:
        """Get monitor status."""
        if self._scheduler is None:
            return {"monitor_running": False, "next_check": None}

        job = self._scheduler.get_job(JOB_ID)
        return {
            "monitor_running": self._scheduler.running,
            "next_check": job.next_run_time if job else None,
        }


# Global stale monitor instance
stale_monitor = StaleApplicationMonitor()
