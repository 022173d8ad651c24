"""Applies staff decisions atomically with their audit entry.

Status change, claim release and the action log entry commit together. The
applicant notification runs after the commit; its failure is returned as a
warning on the outcome and never undoes the decision.
"""

import asyncio
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from reviewgate.core.config import settings
from reviewgate.core.exceptions import (
    InvalidActionError,
    NotClaimantError,
    StaleStateError,
)
from reviewgate.core.storage import Database
from reviewgate.models.application import ReviewClaim
from reviewgate.models.status import ApplicationStatus, ReviewAction, next_status
from reviewgate.schemas.review import CopyUidResult, DecisionOutcome, NotificationReport
from reviewgate.services.action_log import ActionLog
from reviewgate.services.application_store import lock_application
from reviewgate.services.notify import (
    NotificationResult,
    Notice,
    Notifier,
    render_decision_message,
)

logger = logging.getLogger(__name__)

DEFAULT_GUILD_NAME = "the server"


def as_decision(action: ReviewAction | str) -> ReviewAction:
    """Coerce ``action`` to a decision action or raise InvalidActionError."""
    try:
        action = ReviewAction(action)
    except ValueError:
        raise InvalidActionError(str(action)) from None
    if not action.is_decision:
        raise InvalidActionError(action.value)
    return action


class DecisionExecutor:
    """Runs the decision transaction and the follow-up notification."""

    def __init__(
        self,
        db: Database,
        notifier: Notifier,
        action_log: ActionLog | None = None,
        notify_timeout: float | None = None,
    ):
        self.db = db
        self.notifier = notifier
        self.action_log = action_log or ActionLog(db)
        self.notify_timeout = notify_timeout or settings.notify_timeout_seconds

    async def decide(
        self,
        application_id: str,
        staff_id: str,
        action: ReviewAction | str,
        meta: dict[str, Any] | None = None,
        expected_status: ApplicationStatus | None = None,
        reason: str | None = None,
        guild_name: str | None = None,
    ) -> DecisionOutcome:
        """Record ``action`` by ``staff_id`` on a claimed application.

        Raises:
            InvalidActionError: action is not a decision
            NotFoundError: unknown application
            StaleStateError: status differs from ``expected_status``
            InvalidTransitionError: action not allowed from the current status
            NotClaimantError: ``staff_id`` does not hold the claim
        """
        action = as_decision(action)
        audit_meta = dict(meta or {})
        if reason is not None:
            audit_meta["reason"] = reason

        async with self.db.transaction() as session:
            application = await lock_application(session, application_id)
            current = ApplicationStatus(application.status)
            if expected_status is not None and ApplicationStatus(expected_status) != current:
                logger.warning(
                    f"Stale decision on {application_id} by {staff_id}: "
                    f"expected {expected_status}, found {current}"
                )
                raise StaleStateError(application_id, str(expected_status), current.value)

            new_status = next_status(current, action)

            claim = await session.get(ReviewClaim, application_id)
            if claim is None or claim.staff_id != staff_id:
                holder = claim.staff_id if claim else None
                logger.warning(
                    f"Decision {action} on {application_id} by {staff_id} refused: "
                    f"claim held by {holder}"
                )
                raise NotClaimantError(application_id, staff_id, holder)

            application.advance(action)
            claim_released = new_status.is_terminal or new_status is ApplicationStatus.PENDING
            if claim_released:
                await session.delete(claim)

            entry = await self.action_log.append(
                session,
                application,
                staff_id,
                action,
                meta={"prior_status": current.value, **audit_meta},
            )
            guild_id = application.guild_id
            applicant_id = application.applicant_id

        logger.info(
            f"Application {application_id}: {current} -> {new_status} "
            f"by {staff_id} ({action})"
        )
        outcome = DecisionOutcome(
            application_id=application_id,
            action=action,
            prior_status=current,
            status=new_status,
            action_id=entry.id,
            claim_released=claim_released,
        )

        content = render_decision_message(action, guild_name or DEFAULT_GUILD_NAME, reason)
        if content is None:
            return outcome

        result = await self._deliver(
            Notice(
                guild_id=guild_id,
                recipient_id=applicant_id,
                content=content,
                kind=f"decision.{action.value}",
                context={"application_id": application_id, "action": action.value},
            )
        )
        outcome.notification = NotificationReport(
            delivered=result.delivered, error=result.error
        )
        if not result.delivered:
            outcome.warning = f"Notification delivery failed: {result.error}"

        await self._record_delivery(entry.id, result)
        return outcome

    async def copy_uid(self, application_id: str, staff_id: str) -> CopyUidResult:
        """Log that ``staff_id`` copied the applicant's id. Needs no claim."""
        async with self.db.transaction() as session:
            application = await lock_application(session, application_id)
            entry = await self.action_log.append(
                session, application, staff_id, ReviewAction.COPY_UID
            )
            applicant_id = application.applicant_id

        logger.info(f"Applicant id of {application_id} copied by {staff_id}")
        return CopyUidResult(
            application_id=application_id,
            applicant_id=applicant_id,
            action_id=entry.id,
        )

    async def _deliver(self, notice: Notice) -> NotificationResult:
        # The decision is already committed: delivery problems are returned, not raised.
        try:
            return await asyncio.wait_for(
                self.notifier.deliver(notice), timeout=self.notify_timeout
            )
        except TimeoutError:
            logger.warning(
                f"Notification to {notice.recipient_id} timed out after "
                f"{self.notify_timeout}s"
            )
            return NotificationResult(
                delivered=False,
                error=f"timed out after {self.notify_timeout}s",
            )
        except Exception as e:
            logger.warning(f"Notification to {notice.recipient_id} failed: {e!r}")
            return NotificationResult(
                delivered=False, error=str(e) or e.__class__.__name__
            )

    async def _record_delivery(self, entry_id: int, result: NotificationResult) -> None:
        try:
            await self.action_log.backfill_meta(
                entry_id,
                {
                    "notification_delivered": result.delivered,
                    "notification_error": result.error,
                },
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to record delivery result on entry {entry_id}: {e}")
