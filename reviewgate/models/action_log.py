"""Action log model."""

from sqlalchemy import JSON, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from reviewgate.core.storage import Base
from reviewgate.models.application import enum_values
from reviewgate.models.status import ReviewAction


class ActionLogEntry(Base):
    """Append-only audit record of a staff action on an application."""

    __tablename__ = "action_log"
    __table_args__ = (
        Index("ix_action_log_app_time", "application_id", "created_at_s"),
        Index("ix_action_log_actor_time", "guild_id", "actor_id", "created_at_s"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[str] = mapped_column(String(32), nullable=False)
    application_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("application.id"), nullable=False
    )
    actor_id: Mapped[str] = mapped_column(String(32), nullable=False)
    action: Mapped[ReviewAction] = mapped_column(
        Enum(ReviewAction, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
    )
    created_at_s: Mapped[int] = mapped_column(Integer, nullable=False)
    meta: Mapped[dict | None] = mapped_column(JSON, nullable=True)
