"""Tests for the decision transaction executor."""

import pytest
from sqlalchemy import func, select

from reviewgate.core.exceptions import (
    InvalidActionError,
    InvalidTransitionError,
    NotClaimantError,
    NotFoundError,
    StaleStateError,
)
from reviewgate.models.action_log import ActionLogEntry
from reviewgate.models.status import ApplicationStatus, ReviewAction
from reviewgate.services.action_log import ActionLog
from reviewgate.services.decision_executor import DecisionExecutor, as_decision
from reviewgate.services.notify.base import NotificationResult
from conftest import HangingNotifier, RaisingNotifier, RecordingNotifier


async def _log_count(db, application_id):
    async with db.session() as session:
        result = await session.execute(
            select(func.count())
            .select_from(ActionLogEntry)
            .where(ActionLogEntry.application_id == application_id)
        )
        return result.scalar_one()


class TestAsDecision:
    """Tests for decision action validation."""

    def test_accepts_decisions(self):
        assert as_decision("approve") is ReviewAction.APPROVE
        assert as_decision(ReviewAction.KICK) is ReviewAction.KICK

    @pytest.mark.parametrize("action", ["claim", "unclaim", "copy_uid", "ban", ""])
    def test_rejects_non_decisions(self, action):
        with pytest.raises(InvalidActionError):
            as_decision(action)


class TestDecide:
    """Tests for DecisionExecutor.decide."""

    @pytest.mark.asyncio
    async def test_approve_happy_path(self, executor, store, db, notifier, claimed_app):
        """Test approve commits status, releases the claim and notifies."""
        outcome = await executor.decide(
            claimed_app.id,
            "staff-a",
            ReviewAction.APPROVE,
            reason="great answers",
            guild_name="Synth Club",
        )

        assert outcome.status == ApplicationStatus.APPROVED
        assert outcome.prior_status == ApplicationStatus.CLAIMED
        assert outcome.claim_released is True
        assert outcome.warning is None
        assert outcome.notification.delivered is True

        assert await store.get_status(claimed_app.id) == ApplicationStatus.APPROVED
        assert await store.get_claim(claimed_app.id) is None

        entry = (await ActionLog(db).recent_for(claimed_app.id, 1))[0]
        assert entry.id == outcome.action_id
        assert entry.action == ReviewAction.APPROVE
        assert entry.actor_id == "staff-a"
        assert entry.meta["prior_status"] == "claimed"
        assert entry.meta["reason"] == "great answers"
        assert entry.meta["notification_delivered"] is True

        assert len(notifier.sent) == 1
        notice = notifier.sent[0]
        assert notice.recipient_id == "applicant-1"
        assert "Synth Club" in notice.content
        assert "great answers" in notice.content

    @pytest.mark.asyncio
    async def test_need_info_keeps_claim(self, executor, store, claimed_app):
        """Test need_info is not terminal and the claim stays with the reviewer."""
        outcome = await executor.decide(claimed_app.id, "staff-a", "need_info")

        assert outcome.status == ApplicationStatus.NEEDS_INFO
        assert outcome.claim_released is False
        assert (await store.get_claim(claimed_app.id)).staff_id == "staff-a"

        outcome = await executor.decide(claimed_app.id, "staff-a", "reject")
        assert outcome.status == ApplicationStatus.REJECTED
        assert await store.get_claim(claimed_app.id) is None

    @pytest.mark.asyncio
    async def test_caller_meta_is_recorded(self, executor, db, claimed_app):
        await executor.decide(
            claimed_app.id, "staff-a", "kick", meta={"scorer_aggregate": 0.42}
        )
        entry = (await ActionLog(db).recent_for(claimed_app.id, 1))[0]
        assert entry.meta["scorer_aggregate"] == 0.42

    @pytest.mark.asyncio
    async def test_no_double_decision(self, executor, db, claimed_app):
        """Test a second decision on a closed application is refused."""
        await executor.decide(claimed_app.id, "staff-a", ReviewAction.APPROVE)
        count = await _log_count(db, claimed_app.id)

        with pytest.raises(InvalidTransitionError):
            await executor.decide(claimed_app.id, "staff-a", ReviewAction.REJECT)
        assert await _log_count(db, claimed_app.id) == count

    @pytest.mark.asyncio
    async def test_decide_without_claim(self, executor, store, pending_app):
        """Test deciding a pending application fails as an invalid transition."""
        with pytest.raises(InvalidTransitionError):
            await executor.decide(pending_app.id, "staff-a", ReviewAction.APPROVE)
        assert await store.get_status(pending_app.id) == ApplicationStatus.PENDING

    @pytest.mark.asyncio
    async def test_decide_by_non_claimant(self, executor, store, claimed_app):
        with pytest.raises(NotClaimantError) as exc_info:
            await executor.decide(claimed_app.id, "staff-b", ReviewAction.APPROVE)
        assert exc_info.value.claimed_by == "staff-a"
        assert await store.get_status(claimed_app.id) == ApplicationStatus.CLAIMED

    @pytest.mark.asyncio
    async def test_stale_expected_status(self, executor, store, claimed_app):
        """Test a caller working from an outdated view is refused."""
        with pytest.raises(StaleStateError) as exc_info:
            await executor.decide(
                claimed_app.id,
                "staff-a",
                ReviewAction.APPROVE,
                expected_status=ApplicationStatus.PENDING,
            )
        assert exc_info.value.actual == "claimed"
        assert await store.get_status(claimed_app.id) == ApplicationStatus.CLAIMED

    @pytest.mark.asyncio
    async def test_matching_expected_status(self, executor, claimed_app):
        outcome = await executor.decide(
            claimed_app.id,
            "staff-a",
            ReviewAction.APPROVE,
            expected_status=ApplicationStatus.CLAIMED,
        )
        assert outcome.status == ApplicationStatus.APPROVED

    @pytest.mark.asyncio
    async def test_invalid_action_checked_first(self, executor):
        """Test a non-decision fails before the application is looked up."""
        with pytest.raises(InvalidActionError):
            await executor.decide("missing", "staff-a", ReviewAction.CLAIM)

    @pytest.mark.asyncio
    async def test_unknown_application(self, executor):
        with pytest.raises(NotFoundError):
            await executor.decide("missing", "staff-a", ReviewAction.APPROVE)

    @pytest.mark.asyncio
    async def test_fault_in_log_append_rolls_back(
        self, executor, store, db, claimed_app, monkeypatch
    ):
        """Test a failure writing the audit entry leaves no partial change."""
        before = await _log_count(db, claimed_app.id)

        async def broken_append(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(executor.action_log, "append", broken_append)

        with pytest.raises(RuntimeError):
            await executor.decide(claimed_app.id, "staff-a", ReviewAction.APPROVE)

        assert await store.get_status(claimed_app.id) == ApplicationStatus.CLAIMED
        assert (await store.get_claim(claimed_app.id)).staff_id == "staff-a"
        assert await _log_count(db, claimed_app.id) == before


class TestDecisionNotification:
    """Tests for post-commit notification handling."""

    @pytest.mark.asyncio
    async def test_notifier_exception_becomes_warning(self, db, store, claimed_app):
        """Test a crashing notifier does not undo the decision."""
        executor = DecisionExecutor(db, RaisingNotifier(), notify_timeout=0.5)

        outcome = await executor.decide(claimed_app.id, "staff-a", ReviewAction.REJECT)

        assert outcome.status == ApplicationStatus.REJECTED
        assert outcome.warning is not None
        assert "gateway unreachable" in outcome.warning
        assert outcome.notification.delivered is False
        assert await store.get_status(claimed_app.id) == ApplicationStatus.REJECTED

        entry = (await ActionLog(db).recent_for(claimed_app.id, 1))[0]
        assert entry.meta["notification_delivered"] is False
        assert "gateway unreachable" in entry.meta["notification_error"]

    @pytest.mark.asyncio
    async def test_notifier_timeout_becomes_warning(self, db, store, claimed_app):
        executor = DecisionExecutor(db, HangingNotifier(), notify_timeout=0.05)

        outcome = await executor.decide(claimed_app.id, "staff-a", ReviewAction.KICK)

        assert outcome.status == ApplicationStatus.KICKED
        assert "timed out" in outcome.warning
        assert await store.get_status(claimed_app.id) == ApplicationStatus.KICKED

    @pytest.mark.asyncio
    async def test_undelivered_result_becomes_warning(self, db, claimed_app):
        notifier = RecordingNotifier(
            NotificationResult(delivered=False, error="DMs closed")
        )
        executor = DecisionExecutor(db, notifier)

        outcome = await executor.decide(
            claimed_app.id, "staff-a", ReviewAction.PERM_REJECT
        )

        assert outcome.status == ApplicationStatus.PERM_REJECTED
        assert outcome.warning == "Notification delivery failed: DMs closed"


class TestCopyUid:
    """Tests for the audit-only copy_uid action."""

    @pytest.mark.asyncio
    async def test_copy_uid_needs_no_claim(self, executor, store, db, pending_app):
        result = await executor.copy_uid(pending_app.id, "staff-z")

        assert result.applicant_id == "applicant-1"
        assert await store.get_status(pending_app.id) == ApplicationStatus.PENDING
        entry = (await ActionLog(db).recent_for(pending_app.id, 1))[0]
        assert entry.action == ReviewAction.COPY_UID
        assert entry.actor_id == "staff-z"

    @pytest.mark.asyncio
    async def test_copy_uid_on_claimed_by_someone_else(self, executor, store, claimed_app):
        await executor.copy_uid(claimed_app.id, "staff-b")
        assert await store.get_status(claimed_app.id) == ApplicationStatus.CLAIMED
        assert (await store.get_claim(claimed_app.id)).staff_id == "staff-a"

    @pytest.mark.asyncio
    async def test_copy_uid_unknown_application(self, executor):
        with pytest.raises(NotFoundError):
            await executor.copy_uid("missing", "staff-a")
