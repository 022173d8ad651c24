"""Tests for the application state machine."""

import pytest

from reviewgate.core.exceptions import InvalidTransitionError
from reviewgate.models.application import Application
from reviewgate.models.status import (
    DECISION_ACTIONS,
    TERMINAL_DECISIONS,
    TERMINAL_STATUSES,
    ApplicationStatus,
    ReviewAction,
    next_status,
)

S = ApplicationStatus
A = ReviewAction


class TestNextStatus:
    """Tests for the transition table."""

    @pytest.mark.parametrize(
        "status,action,expected",
        [
            (S.PENDING, A.CLAIM, S.CLAIMED),
            (S.CLAIMED, A.UNCLAIM, S.PENDING),
            (S.CLAIMED, A.APPROVE, S.APPROVED),
            (S.CLAIMED, A.REJECT, S.REJECTED),
            (S.CLAIMED, A.PERM_REJECT, S.PERM_REJECTED),
            (S.CLAIMED, A.KICK, S.KICKED),
            (S.CLAIMED, A.NEED_INFO, S.NEEDS_INFO),
            (S.NEEDS_INFO, A.APPROVE, S.APPROVED),
            (S.NEEDS_INFO, A.UNCLAIM, S.PENDING),
            (S.NEEDS_INFO, A.NEED_INFO, S.NEEDS_INFO),
        ],
    )
    def test_allowed_transitions(self, status, action, expected):
        """Test every edge of the lifecycle."""
        assert next_status(status, action) == expected

    @pytest.mark.parametrize(
        "status,action",
        [
            (S.PENDING, A.APPROVE),
            (S.PENDING, A.UNCLAIM),
            (S.PENDING, A.KICK),
            (S.CLAIMED, A.CLAIM),
            (S.APPROVED, A.CLAIM),
            (S.APPROVED, A.REJECT),
            (S.REJECTED, A.UNCLAIM),
            (S.KICKED, A.APPROVE),
            (S.PERM_REJECTED, A.CLAIM),
        ],
    )
    def test_forbidden_transitions(self, status, action):
        """Test that anything outside the table raises."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_status(status, action)
        assert exc_info.value.status == status.value
        assert exc_info.value.action == action.value

    @pytest.mark.parametrize("status", list(ApplicationStatus))
    def test_copy_uid_never_changes_status(self, status):
        """Test copy_uid is allowed from every state and is a no-op."""
        assert next_status(status, A.COPY_UID) == status

    def test_accepts_plain_strings(self):
        """Test raw values are coerced to enums."""
        assert next_status("pending", "claim") is S.CLAIMED


class TestStatusSets:
    """Tests for derived status groupings."""

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {S.APPROVED, S.REJECTED, S.PERM_REJECTED, S.KICKED}

    def test_need_info_is_not_terminal_decision(self):
        """Test need_info is a decision but does not close the application."""
        assert A.NEED_INFO in DECISION_ACTIONS
        assert A.NEED_INFO not in TERMINAL_DECISIONS
        assert TERMINAL_DECISIONS == {A.APPROVE, A.REJECT, A.PERM_REJECT, A.KICK}

    def test_claim_is_not_a_decision(self):
        assert not A.CLAIM.is_decision
        assert not A.COPY_UID.is_decision

    def test_holds_claim(self):
        assert S.CLAIMED.holds_claim
        assert S.NEEDS_INFO.holds_claim
        assert not S.PENDING.holds_claim
        assert not S.APPROVED.holds_claim


class TestApplicationModel:
    """Tests for status writes on the Application model."""

    def _application(self):
        return Application(
            guild_id="g",
            applicant_id="u",
            status=S.PENDING,
            answers=[],
            submitted_at_s=0,
        )

    def test_new_application_must_be_pending(self):
        """Test an application cannot be created in a later state."""
        with pytest.raises(ValueError):
            Application(guild_id="g", applicant_id="u", status=S.APPROVED, submitted_at_s=0)

    def test_advance_returns_prior_status(self):
        application = self._application()
        prior = application.advance(A.CLAIM)
        assert prior is S.PENDING
        assert application.status is S.CLAIMED

    def test_direct_assignment_outside_table_rejected(self):
        """Test skipping the claim step by assignment is refused."""
        application = self._application()
        with pytest.raises(ValueError):
            application.status = S.APPROVED

    def test_invalid_advance_leaves_status_untouched(self):
        application = self._application()
        with pytest.raises(InvalidTransitionError):
            application.advance(A.APPROVE)
        assert application.status is S.PENDING

    def test_is_terminal(self):
        application = self._application()
        application.advance(A.CLAIM)
        assert application.is_terminal is False
        application.advance(A.KICK)
        assert application.is_terminal is True
