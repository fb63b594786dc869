"""Tests for the board registry and slug derivation."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from cardboard.core.boards import (
    BoardRegistry,
    derive_slug,
    get_published_board,
    slugify,
)
from cardboard.core.errors import MutationError, NotFoundError


class TestSlugify:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("My Board!!", "my-board"),
            ("  Summer   Picks 2024 ", "summer-picks-2024"),
            ("--already-clean--", "already-clean"),
            ("Café & Crème", "caf-cr-me"),
            ("UPPER_case", "upper-case"),
        ],
    )
    def test_slugify(self, value, expected):
        assert slugify(value) == expected

    @pytest.mark.parametrize("value", ["My Board!!", "a  b", "-x-", "Ünïcode Title", "", "2024/05/01"])
    def test_idempotent(self, value):
        once = slugify(value)
        assert slugify(once) == once

    @pytest.mark.parametrize("value", ["!!!", "   ", "***---***", "ü"])
    def test_only_symbols_fall_back_to_timestamp(self, value):
        assert slugify(value) == ""
        assert re.fullmatch(r"board-\d{13}", derive_slug(value, ""))

    def test_explicit_slug_wins_over_title(self):
        assert derive_slug("My Board", "Custom Slug") == "custom-slug"

    def test_empty_slug_uses_title(self):
        assert derive_slug("My Board!!", "") == "my-board"
        assert derive_slug("My Board!!", None) == "my-board"


class TestBoardRegistry:
    @pytest.mark.asyncio
    async def test_create_board_defaults(self, db, owner):
        registry = BoardRegistry(db, owner.id)
        board = await registry.create_board("My Board!!", "")

        assert board.slug == "my-board"
        assert board.status == "draft"
        assert board.visibility == "public"
        assert board.owner_id == owner.id
        assert board.background_url is None

    @pytest.mark.asyncio
    async def test_blank_title_is_untitled(self, db, owner):
        board = await BoardRegistry(db, owner.id).create_board("", "")
        assert board.title == "Untitled"
        assert board.slug.startswith("board-")

    @pytest.mark.asyncio
    async def test_create_without_user_is_noop(self, db):
        registry = BoardRegistry(db, None)
        assert await registry.create_board("Anything", "") is None
        assert await registry.list_boards() == []

    @pytest.mark.asyncio
    async def test_duplicate_slugs_are_allowed(self, db, owner):
        registry = BoardRegistry(db, owner.id)
        first = await registry.create_board("Same", "")
        second = await registry.create_board("Same", "")
        assert first.slug == second.slug
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_list_orders_by_updated_at_desc(self, db, owner):
        registry = BoardRegistry(db, owner.id)
        old = await registry.create_board("Old", "")
        new = await registry.create_board("New", "")
        old.updated_at = datetime(2020, 1, 1, tzinfo=UTC)
        new.updated_at = datetime(2024, 1, 1, tzinfo=UTC)
        await db.commit()

        assert [b.title for b in await registry.list_boards()] == ["New", "Old"]

        old.updated_at = datetime(2025, 1, 1, tzinfo=UTC)
        await db.commit()
        assert [b.title for b in await registry.list_boards()] == ["Old", "New"]

    @pytest.mark.asyncio
    async def test_list_only_returns_own_boards(self, db, owner, other_owner):
        await BoardRegistry(db, owner.id).create_board("Mine", "")
        await BoardRegistry(db, other_owner.id).create_board("Theirs", "")

        boards = await BoardRegistry(db, owner.id).list_boards()
        assert [b.title for b in boards] == ["Mine"]

    @pytest.mark.asyncio
    async def test_list_failure_returns_empty(self):
        db = AsyncMock(spec=AsyncSession)
        db.execute.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))

        assert await BoardRegistry(db, "owner-1").list_boards() == []

    @pytest.mark.asyncio
    async def test_set_status(self, db, owner):
        registry = BoardRegistry(db, owner.id)
        board = await registry.create_board("Publish me", "")

        published = await registry.set_status(board.id, "published")
        assert published.status == "published"

        draft = await registry.set_status(board.id, "draft")
        assert draft.status == "draft"

    @pytest.mark.asyncio
    async def test_set_status_rejects_unknown_value(self, db, owner):
        registry = BoardRegistry(db, owner.id)
        board = await registry.create_board("B", "")
        with pytest.raises(MutationError):
            await registry.set_status(board.id, "archived")

    @pytest.mark.asyncio
    async def test_set_status_on_foreign_board(self, db, owner, other_owner):
        board = await BoardRegistry(db, owner.id).create_board("Mine", "")
        with pytest.raises(NotFoundError):
            await BoardRegistry(db, other_owner.id).set_status(board.id, "published")

    @pytest.mark.asyncio
    async def test_set_background_url_trims_and_clears(self, db, owner):
        registry = BoardRegistry(db, owner.id)
        board = await registry.create_board("Bg", "")

        board = await registry.set_background_url(board.id, "  https://img.example/bg.jpg  ")
        assert board.background_url == "https://img.example/bg.jpg"

        board = await registry.set_background_url(board.id, "   ")
        assert board.background_url is None


class TestPublishedBoard:
    @pytest.mark.asyncio
    async def test_only_published_public_boards_are_visible(self, db, owner):
        registry = BoardRegistry(db, owner.id)
        board = await registry.create_board("Shown", "")

        assert await get_published_board(db, "shown") is None

        await registry.set_status(board.id, "published")
        found = await get_published_board(db, "shown")
        assert found is not None and found.id == board.id

        board.visibility = "private"
        await db.commit()
        assert await get_published_board(db, "shown") is None
