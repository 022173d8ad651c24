"""Short code index model."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from reviewgate.core.storage import Base


class ShortCodeIndex(Base):
    """Maps a 6-hex-digit code to exactly one application."""

    __tablename__ = "short_code_index"

    application_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("application.id"), primary_key=True
    )
    guild_id: Mapped[str] = mapped_column(String(32), nullable=False)
    # Unique across all guilds, not per guild.
    code: Mapped[str] = mapped_column(String(6), nullable=False, unique=True, index=True)
