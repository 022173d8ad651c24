"""Custom exceptions for the review engine."""

from fastapi import HTTPException, status


class ReviewError(Exception):
    """Base exception for review engine errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NotFoundError(ReviewError):
    """Raised when an application, thread or short code does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key} not found")


class AlreadyClaimedError(ReviewError):
    """Raised when another staff member won the claim race."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, application_id: str, claimed_by: str | None = None):
        self.application_id = application_id
        self.claimed_by = claimed_by
        holder = f" by {claimed_by}" if claimed_by else ""
        super().__init__(f"Application {application_id} is already claimed{holder}")


class NotClaimantError(ReviewError):
    """Raised when the actor does not hold the claim on an application."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, application_id: str, staff_id: str, claimed_by: str | None):
        self.application_id = application_id
        self.staff_id = staff_id
        self.claimed_by = claimed_by
        if claimed_by is None:
            detail = "is not claimed; claim it first"
        else:
            detail = f"is claimed by {claimed_by}"
        super().__init__(f"Application {application_id} {detail}")


class InvalidTransitionError(ReviewError):
    """Raised when an action is not allowed from the current status."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, status_value: str, action: str):
        self.status = status_value
        self.action = action
        super().__init__(f"Cannot {action} an application that is {status_value}")


class InvalidActionError(ReviewError):
    """Raised when an action is not a staff decision."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"{action} is not a decision action")


class StaleStateError(ReviewError):
    """Raised when the caller's view of an application is out of date."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, application_id: str, expected: str, actual: str):
        self.application_id = application_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Application {application_id} is {actual}, expected {expected}"
        )


class CodeSpaceExhaustedError(ReviewError):
    """Raised when no unused short code was found within the retry budget."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, application_id: str, attempts: int):
        self.application_id = application_id
        self.attempts = attempts
        super().__init__(
            f"No free short code for application {application_id} after {attempts} attempts"
        )


class PanicModeError(ReviewError):
    """Raised when review operations are suspended for a guild."""

    status_code = status.HTTP_423_LOCKED

    def __init__(self, guild_id: str):
        self.guild_id = guild_id
        super().__init__("Panic mode is active. All review operations are suspended.")


def to_http_exception(error: ReviewError) -> HTTPException:
    """Return the HTTP exception matching a review error."""
    return HTTPException(status_code=error.status_code, detail=error.message)
