"""Per-guild review state."""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from reviewgate.core.storage import Base


class GuildReviewState(Base):
    """Review kill switch for a guild."""

    __tablename__ = "guild_review_state"

    guild_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    panic_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    panic_enabled_at_s: Mapped[int | None] = mapped_column(Integer, nullable=True)
    panic_enabled_by: Mapped[str | None] = mapped_column(String(32), nullable=True)
