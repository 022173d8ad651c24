"""Persistent record of applications and their claims."""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reviewgate.core.exceptions import NotFoundError, PanicModeError
from reviewgate.core.storage import Database
from reviewgate.models.application import Application, ReviewClaim
from reviewgate.models.status import OPEN_STATUSES, ApplicationStatus
from reviewgate.services.panic import PanicSwitch, panic_switch
from reviewgate.services.short_codes import ShortCodeResolver
from reviewgate.utils.time import now_s

logger = logging.getLogger(__name__)


class ApplicationStore:
    """CRUD and status reads; owns no review behaviour."""

    def __init__(
        self,
        db: Database,
        short_codes: ShortCodeResolver | None = None,
        panic: PanicSwitch | None = None,
    ):
        self.db = db
        self.short_codes = short_codes or ShortCodeResolver(db)
        self.panic = panic or panic_switch

    async def submit(
        self,
        guild_id: str,
        applicant_id: str,
        answers: list[dict[str, Any]],
        submitted_at_s: int | None = None,
    ) -> Application:
        """Record a submitted application as pending, with its short code."""
        if self.panic.is_active(guild_id):
            logger.warning(
                f"Submission by {applicant_id} blocked: panic mode active in guild {guild_id}"
            )
            raise PanicModeError(guild_id)

        async with self.db.transaction() as session:
            application = Application(
                guild_id=guild_id,
                applicant_id=applicant_id,
                status=ApplicationStatus.PENDING,
                answers=[dict(item) for item in answers],
                submitted_at_s=submitted_at_s if submitted_at_s is not None else now_s(),
            )
            session.add(application)
            await session.flush()
            await self.short_codes.assign_in(session, application)

        logger.info(
            f"Application {application.id} submitted by {applicant_id} in guild "
            f"{guild_id} (code {application.short_code})"
        )
        return application

    async def get(self, application_id: str) -> Application:
        async with self.db.session() as session:
            application = await session.get(Application, application_id)
        if application is None:
            raise NotFoundError("Application", application_id)
        return application

    async def get_status(self, application_id: str) -> ApplicationStatus:
        return ApplicationStatus((await self.get(application_id)).status)

    async def get_claim(self, application_id: str) -> ReviewClaim | None:
        async with self.db.session() as session:
            return await session.get(ReviewClaim, application_id)

    async def find_open_for_applicant(
        self, guild_id: str, applicant_id: str
    ) -> Application | None:
        """Most recent application of a user that is still under review."""
        query = (
            select(Application)
            .where(
                Application.guild_id == guild_id,
                Application.applicant_id == applicant_id,
                Application.status.in_(sorted(OPEN_STATUSES)),
            )
            .order_by(Application.submitted_at_s.desc())
            .limit(1)
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            return result.scalar_one_or_none()

    async def list_open(
        self,
        guild_id: str,
        claimed_by: str | None = None,
        limit: int = 25,
        offset: int = 0,
    ) -> tuple[list[tuple[Application, ReviewClaim | None]], int]:
        """Applications still under review, with their claim, newest claim first."""
        conditions = [
            Application.guild_id == guild_id,
            Application.status.in_(sorted(OPEN_STATUSES)),
        ]
        if claimed_by is not None:
            conditions.append(ReviewClaim.staff_id == claimed_by)

        query = (
            select(Application, ReviewClaim)
            .outerjoin(ReviewClaim, ReviewClaim.application_id == Application.id)
            .where(*conditions)
            .order_by(
                ReviewClaim.claimed_at_s.desc().nulls_last(),
                Application.submitted_at_s.asc(),
            )
            .limit(limit)
            .offset(offset)
        )
        count_query = (
            select(func.count())
            .select_from(Application)
            .outerjoin(ReviewClaim, ReviewClaim.application_id == Application.id)
            .where(*conditions)
        )
        async with self.db.session() as session:
            rows = (await session.execute(query)).all()
            total = (await session.execute(count_query)).scalar_one()
        return [(row[0], row[1]) for row in rows], total

    async def list_stale(self, cutoff_s: int) -> list[Application]:
        """Pending, unclaimed applications submitted before ``cutoff_s`` and not yet alerted."""
        query = (
            select(Application)
            .outerjoin(ReviewClaim, ReviewClaim.application_id == Application.id)
            .where(
                Application.status == ApplicationStatus.PENDING,
                ReviewClaim.application_id.is_(None),
                Application.submitted_at_s < cutoff_s,
                Application.stale_alert_sent.is_(False),
            )
            .order_by(Application.guild_id, Application.submitted_at_s)
        )
        async with self.db.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def mark_stale_alerted(self, application_ids: list[str]) -> None:
        if not application_ids:
            return
        async with self.db.transaction() as session:
            result = await session.execute(
                select(Application).where(Application.id.in_(application_ids))
            )
            for application in result.scalars():
                application.stale_alert_sent = True


async def lock_application(session: AsyncSession, application_id: str) -> Application:
    """Load an application for update inside an open transaction.

    SQLite has no row locks and ignores FOR UPDATE; there the surrounding
    transaction already serializes writers.
    """
    result = await session.execute(
        select(Application).where(Application.id == application_id).with_for_update()
    )
    application = result.scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application", application_id)
    return application
