"""Tests for short-code assignment and lookup."""

import re

import pytest
from sqlalchemy import func, select

from reviewgate.core.exceptions import CodeSpaceExhaustedError, NotFoundError
from reviewgate.models.application import Application
from reviewgate.models.short_code import ShortCodeIndex
from reviewgate.services.application_store import ApplicationStore
from reviewgate.services.short_codes import (
    ShortCodeResolver,
    generate_code,
    normalize_code,
)

GUILD_ID = "guild-1"


class TestCodeHelpers:
    """Tests for code generation and normalization."""

    def test_generate_code_format(self):
        for _ in range(20):
            assert re.fullmatch(r"[0-9A-F]{6}", generate_code())

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("98ff66", "98FF66"),
            ("#98FF66", "98FF66"),
            ("  98 ff 66 ", "98FF66"),
            ("98FF66AA", "98FF66"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize_code(self, raw, expected):
        assert normalize_code(raw) == expected


class TestShortCodeResolver:
    """Tests for ShortCodeResolver."""

    @pytest.mark.asyncio
    async def test_submit_assigns_code(self, pending_app, db):
        """Test every submitted application gets an indexed code."""
        assert re.fullmatch(r"[0-9A-F]{6}", pending_app.short_code)
        assert await ShortCodeResolver(db).resolve(pending_app.short_code) == pending_app.id

    @pytest.mark.asyncio
    async def test_resolve_is_case_insensitive(self, pending_app, db):
        resolver = ShortCodeResolver(db)
        assert await resolver.resolve(pending_app.short_code.lower()) == pending_app.id
        assert await resolver.resolve(f"#{pending_app.short_code}") == pending_app.id

    @pytest.mark.asyncio
    async def test_resolve_unknown_code(self, db, pending_app):
        code = "000000" if pending_app.short_code != "000000" else "000001"
        with pytest.raises(NotFoundError):
            await ShortCodeResolver(db).resolve(code)

    @pytest.mark.asyncio
    async def test_resolve_malformed_code(self, db):
        with pytest.raises(NotFoundError):
            await ShortCodeResolver(db).resolve("xyz")

    @pytest.mark.asyncio
    async def test_assign_is_idempotent(self, pending_app, db):
        resolver = ShortCodeResolver(db)
        assert await resolver.assign(pending_app.id, GUILD_ID) == pending_app.short_code
        assert await resolver.assign(pending_app.id, GUILD_ID) == pending_app.short_code

    @pytest.mark.asyncio
    async def test_assign_wrong_guild(self, pending_app, db):
        with pytest.raises(NotFoundError):
            await ShortCodeResolver(db).assign(pending_app.id, "other-guild")

    @pytest.mark.asyncio
    async def test_collision_is_retried(self, db):
        """Test a colliding code is discarded and the next one used."""
        codes = iter(["AAAAAA", "AAAAAA", "BBBBBB"])
        store = ApplicationStore(db, ShortCodeResolver(db, code_factory=lambda: next(codes)))

        first = await store.submit(GUILD_ID, "u1", [])
        second = await store.submit(GUILD_ID, "u2", [])

        assert first.short_code == "AAAAAA"
        assert second.short_code == "BBBBBB"

    @pytest.mark.asyncio
    async def test_code_space_exhausted(self, db):
        """Test retries are bounded and the failed submission leaves nothing behind."""
        resolver = ShortCodeResolver(db, max_attempts=3, code_factory=lambda: "ABCDEF")
        store = ApplicationStore(db, resolver)
        await store.submit(GUILD_ID, "u1", [])

        with pytest.raises(CodeSpaceExhaustedError) as exc_info:
            await store.submit(GUILD_ID, "u2", [])
        assert exc_info.value.attempts == 3

        async with db.session() as session:
            apps = (await session.execute(select(func.count()).select_from(Application))).scalar_one()
            codes = (await session.execute(select(func.count()).select_from(ShortCodeIndex))).scalar_one()
        assert apps == 1
        assert codes == 1
