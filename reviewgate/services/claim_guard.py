"""Exclusive claims on applications.

A claim is a row in ``review_claim`` keyed by application id. Winning a claim
race is decided by that primary key: the insert either succeeds or raises an
IntegrityError, and the error is the "someone else already has it" answer.
There is no read-then-insert check for an existing claim.
"""

import logging

from sqlalchemy.exc import IntegrityError

from reviewgate.core.exceptions import (
    AlreadyClaimedError,
    InvalidTransitionError,
    NotClaimantError,
    PanicModeError,
)
from reviewgate.core.storage import Database
from reviewgate.models.application import Application, ReviewClaim
from reviewgate.models.status import ReviewAction
from reviewgate.schemas.review import ClaimResult, UnclaimResult
from reviewgate.services.action_log import ActionLog
from reviewgate.services.application_store import lock_application
from reviewgate.services.panic import PanicSwitch, panic_switch
from reviewgate.utils.time import now_s

logger = logging.getLogger(__name__)


class ClaimGuard:
    """Grants and releases exclusive handling of an application."""

    def __init__(
        self,
        db: Database,
        action_log: ActionLog | None = None,
        panic: PanicSwitch | None = None,
    ):
        self.db = db
        self.action_log = action_log or ActionLog(db)
        self.panic = panic or panic_switch

    def _check_panic(self, application: Application, staff_id: str) -> None:
        if self.panic.is_active(application.guild_id):
            logger.warning(
                f"Review operation by {staff_id} on {application.id} blocked: "
                f"panic mode active in guild {application.guild_id}"
            )
            raise PanicModeError(application.guild_id)

    async def claim(self, application_id: str, staff_id: str) -> ClaimResult:
        """Claim a pending application for ``staff_id``."""
        try:
            async with self.db.transaction() as session:
                application = await lock_application(session, application_id)
                self._check_panic(application, staff_id)
                if application.is_terminal:
                    raise InvalidTransitionError(application.status, ReviewAction.CLAIM)

                timestamp = now_s()
                session.add(
                    ReviewClaim(
                        application_id=application_id,
                        staff_id=staff_id,
                        claimed_at_s=timestamp,
                    )
                )
                try:
                    await session.flush()
                except IntegrityError:
                    raise AlreadyClaimedError(application_id) from None

                application.advance(ReviewAction.CLAIM)
                entry = await self.action_log.append(
                    session,
                    application,
                    staff_id,
                    ReviewAction.CLAIM,
                    created_at_s=timestamp,
                )
        except AlreadyClaimedError:
            claim = await self.current_claim(application_id)
            holder = claim.staff_id if claim else None
            logger.warning(
                f"Claim on {application_id} by {staff_id} lost: held by {holder}"
            )
            raise AlreadyClaimedError(application_id, holder) from None

        logger.info(f"Application {application_id} claimed by {staff_id}")
        return ClaimResult(
            application_id=application_id,
            staff_id=staff_id,
            status=application.status,
            claimed_at_s=timestamp,
            action_id=entry.id,
        )

    async def unclaim(self, application_id: str, staff_id: str) -> UnclaimResult:
        """Release a claim held by ``staff_id`` and return the application to the queue."""
        async with self.db.transaction() as session:
            application = await lock_application(session, application_id)
            self._check_panic(application, staff_id)

            claim = await session.get(ReviewClaim, application_id)
            if claim is None:
                raise InvalidTransitionError(application.status, ReviewAction.UNCLAIM)
            if claim.staff_id != staff_id:
                logger.warning(
                    f"Unclaim of {application_id} by {staff_id} refused: "
                    f"held by {claim.staff_id}"
                )
                raise NotClaimantError(application_id, staff_id, claim.staff_id)

            entry = await self._release(session, application, claim, staff_id)

        logger.info(f"Application {application_id} unclaimed by {staff_id}")
        return UnclaimResult(
            application_id=application_id,
            staff_id=staff_id,
            status=application.status,
            action_id=entry.id,
            released_holder=staff_id,
        )

    async def force_release(self, application_id: str, actor_id: str) -> UnclaimResult:
        """Release a stuck claim regardless of who holds it."""
        async with self.db.transaction() as session:
            application = await lock_application(session, application_id)
            claim = await session.get(ReviewClaim, application_id)
            if claim is None:
                raise InvalidTransitionError(application.status, ReviewAction.UNCLAIM)
            holder = claim.staff_id
            entry = await self._release(
                session,
                application,
                claim,
                actor_id,
                extra_meta={"forced": True, "released_holder": holder},
            )

        logger.warning(
            f"Claim on {application_id} held by {holder} force-released by {actor_id}"
        )
        return UnclaimResult(
            application_id=application_id,
            staff_id=actor_id,
            status=application.status,
            action_id=entry.id,
            released_holder=holder,
            forced=True,
        )

    async def _release(self, session, application, claim, actor_id, extra_meta=None):
        await session.delete(claim)
        prior = application.advance(ReviewAction.UNCLAIM)
        meta = {"prior_status": prior.value, **(extra_meta or {})}
        return await self.action_log.append(
            session, application, actor_id, ReviewAction.UNCLAIM, meta=meta
        )

    async def current_claim(self, application_id: str) -> ReviewClaim | None:
        async with self.db.session() as session:
            return await session.get(ReviewClaim, application_id)
