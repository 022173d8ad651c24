"""Application and claim models."""

from uuid import uuid4

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from reviewgate.core.storage import Base
from reviewgate.models.status import (
    ApplicationStatus,
    ReviewAction,
    is_valid_edge,
    next_status,
)


def _new_id() -> str:
    return uuid4().hex


def enum_values(enum_cls) -> list[str]:
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]


class Application(Base):
    """A membership application moving through review."""

    __tablename__ = "application"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    guild_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    applicant_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(
            ApplicationStatus,
            native_enum=False,
            length=20,
            values_callable=enum_values,
        ),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
    )
    # Ordered [{"question": ..., "answer": ...}] captured at submission.
    answers: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    submitted_at_s: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    short_code: Mapped[str | None] = mapped_column(String(6), nullable=True, unique=True)
    stale_alert_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @validates("status")
    def _validate_status(self, key, value):
        value = ApplicationStatus(value)
        current = self.__dict__.get("status")
        if current is None:
            if value is not ApplicationStatus.PENDING:
                raise ValueError("Applications start as pending")
        elif value != current and not is_valid_edge(current, value):
            raise ValueError(f"Status cannot move from {current} to {value}")
        return value

    def advance(self, action: ReviewAction) -> ApplicationStatus:
        """Apply ``action`` to this application and return the prior status."""
        prior = ApplicationStatus(self.status)
        self.status = next_status(prior, action)
        return prior

    @property
    def is_terminal(self) -> bool:
        return ApplicationStatus(self.status).is_terminal


class ReviewClaim(Base):
    """Exclusive-handling lock, at most one per application."""

    __tablename__ = "review_claim"

    # The primary key is what rejects a second concurrent claim.
    application_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("application.id"), primary_key=True
    )
    staff_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    claimed_at_s: Mapped[int] = mapped_column(Integer, nullable=False)
