"""Short-code index: compact, globally unique lookup tokens for applications."""

import logging
import re
import secrets
from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reviewgate.core.config import settings
from reviewgate.core.exceptions import CodeSpaceExhaustedError, NotFoundError
from reviewgate.core.storage import Database
from reviewgate.models.application import Application
from reviewgate.models.short_code import ShortCodeIndex

logger = logging.getLogger(__name__)

CODE_LENGTH = 6
_NON_HEX = re.compile(r"[^0-9A-F]")


def generate_code() -> str:
    """Return a random 6-hex-digit code."""
    return secrets.token_hex(CODE_LENGTH // 2).upper()


def normalize_code(raw: str | None) -> str:
    """Clean user input ("code 98ff66", "#98FF66") down to the canonical form."""
    cleaned = _NON_HEX.sub("", str(raw or "").upper())
    return cleaned[:CODE_LENGTH]


class ShortCodeResolver:
    """Assigns and resolves short codes through the ``short_code_index`` table."""

    def __init__(
        self,
        db: Database,
        max_attempts: int | None = None,
        code_factory: Callable[[], str] = generate_code,
    ):
        self.db = db
        self.max_attempts = max_attempts or settings.short_code_max_attempts
        self.code_factory = code_factory

    async def assign(self, application_id: str, guild_id: str) -> str:
        """Give an application its code, or return the one it already has."""
        async with self.db.transaction() as session:
            application = await session.get(Application, application_id)
            if application is None or application.guild_id != guild_id:
                raise NotFoundError("Application", application_id)
            return await self.assign_in(session, application)

    async def assign_in(self, session: AsyncSession, application: Application) -> str:
        """Assign a code inside the caller's transaction.

        Each attempt runs under a savepoint so a uniqueness violation only
        discards that attempt.
        """
        if application.short_code:
            return application.short_code

        existing = await session.get(ShortCodeIndex, application.id)
        if existing is not None:
            application.short_code = existing.code
            return existing.code

        for attempt in range(1, self.max_attempts + 1):
            code = self.code_factory()
            try:
                async with session.begin_nested():
                    session.add(
                        ShortCodeIndex(
                            application_id=application.id,
                            guild_id=application.guild_id,
                            code=code,
                        )
                    )
                    await session.flush()
            except IntegrityError:
                logger.warning(
                    f"Short code collision on {code} for application {application.id} "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                continue

            application.short_code = code
            logger.debug(f"Assigned short code {code} to application {application.id}")
            return code

        logger.error(
            f"Short code space exhausted for application {application.id} "
            f"after {self.max_attempts} attempts"
        )
        raise CodeSpaceExhaustedError(application.id, self.max_attempts)

    async def resolve(self, code: str) -> str:
        """Return the application id a code points to."""
        normalized = normalize_code(code)
        if len(normalized) != CODE_LENGTH:
            raise NotFoundError("Short code", str(code))

        async with self.db.session() as session:
            result = await session.execute(
                select(ShortCodeIndex.application_id).where(
                    ShortCodeIndex.code == normalized
                )
            )
            application_id = result.scalar_one_or_none()

        if application_id is None:
            raise NotFoundError("Short code", normalized)
        return application_id
