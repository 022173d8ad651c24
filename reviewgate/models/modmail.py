"""Modmail thread model."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from reviewgate.core.storage import Base

THREAD_OPEN = "open"
THREAD_CLOSED = "closed"


class ModmailThread(Base):
    """Persisted conversation thread; the source of truth for the routing cache."""

    __tablename__ = "modmail_thread"

    thread_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    guild_id: Mapped[str] = mapped_column(String(32), nullable=False)
    application_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("application.id"), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=THREAD_OPEN, index=True
    )
    opened_at_s: Mapped[int] = mapped_column(Integer, nullable=False)
    closed_at_s: Mapped[int | None] = mapped_column(Integer, nullable=True)
