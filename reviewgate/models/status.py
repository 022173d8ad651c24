"""Application lifecycle states and the transition table.

``next_status`` is the single place that decides how an action moves an
application between states. ``Application.advance`` is the only caller that
writes the result back to the model.
"""

from enum import StrEnum

from reviewgate.core.exceptions import InvalidTransitionError


class ApplicationStatus(StrEnum):
    PENDING = "pending"
    CLAIMED = "claimed"
    NEEDS_INFO = "needs_info"
    APPROVED = "approved"
    REJECTED = "rejected"
    PERM_REJECTED = "perm_rejected"
    KICKED = "kicked"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def holds_claim(self) -> bool:
        """Whether an application in this state has a claim row."""
        return self in (ApplicationStatus.CLAIMED, ApplicationStatus.NEEDS_INFO)


class ReviewAction(StrEnum):
    CLAIM = "claim"
    UNCLAIM = "unclaim"
    APPROVE = "approve"
    REJECT = "reject"
    NEED_INFO = "need_info"
    KICK = "kick"
    PERM_REJECT = "perm_reject"
    COPY_UID = "copy_uid"

    @property
    def is_decision(self) -> bool:
        return self in DECISION_ACTIONS


TERMINAL_STATUSES = frozenset(
    {
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.PERM_REJECTED,
        ApplicationStatus.KICKED,
    }
)

OPEN_STATUSES = frozenset(set(ApplicationStatus) - TERMINAL_STATUSES)

DECISION_TARGETS: dict[ReviewAction, ApplicationStatus] = {
    ReviewAction.APPROVE: ApplicationStatus.APPROVED,
    ReviewAction.REJECT: ApplicationStatus.REJECTED,
    ReviewAction.PERM_REJECT: ApplicationStatus.PERM_REJECTED,
    ReviewAction.KICK: ApplicationStatus.KICKED,
    ReviewAction.NEED_INFO: ApplicationStatus.NEEDS_INFO,
}

DECISION_ACTIONS = frozenset(DECISION_TARGETS)

# Decisions that close the application; used by claim->decision timing.
TERMINAL_DECISIONS = frozenset(
    action for action, target in DECISION_TARGETS.items() if target.is_terminal
)


def _build_transitions() -> dict[tuple[ApplicationStatus, ReviewAction], ApplicationStatus]:
    table = {(ApplicationStatus.PENDING, ReviewAction.CLAIM): ApplicationStatus.CLAIMED}
    for held in (ApplicationStatus.CLAIMED, ApplicationStatus.NEEDS_INFO):
        table[(held, ReviewAction.UNCLAIM)] = ApplicationStatus.PENDING
        for action, target in DECISION_TARGETS.items():
            table[(held, action)] = target
    return table


TRANSITIONS = _build_transitions()


def next_status(status: ApplicationStatus, action: ReviewAction) -> ApplicationStatus:
    """Return the status an application moves to when ``action`` is applied.

    ``copy_uid`` is an audit-only action and leaves every status unchanged.
    Raises InvalidTransitionError for any pair not in the table.
    """
    status = ApplicationStatus(status)
    action = ReviewAction(action)
    if action is ReviewAction.COPY_UID:
        return status
    try:
        return TRANSITIONS[(status, action)]
    except KeyError:
        raise InvalidTransitionError(status.value, action.value) from None


def is_valid_edge(current: ApplicationStatus, new: ApplicationStatus) -> bool:
    """Whether some action moves ``current`` to ``new``."""
    return any(
        source == current and target == new
        for (source, _), target in TRANSITIONS.items()
    )
