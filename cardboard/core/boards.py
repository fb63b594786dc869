"""Board registry: owner-scoped board creation, listing and publication."""

from __future__ import annotations

import logging
import re
import time
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardboard.core.errors import MutationError, NotFoundError, db_error_message
from cardboard.db.models import Board

logger = logging.getLogger(__name__)

BOARD_STATUSES = ("draft", "published")

_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")


def slugify(value: Optional[str]) -> str:
    """Lowercase, collapse anything outside ``[a-z0-9]`` into single hyphens, strip edge hyphens."""
    slug = _NON_SLUG_RUN.sub("-", (value or "").lower().strip())
    return slug.strip("-")


def fallback_slug() -> str:
    return f"board-{int(time.time() * 1000)}"


def derive_slug(title: Optional[str], raw_slug: Optional[str] = None) -> str:
    return slugify(raw_slug or title) or fallback_slug()


class BoardRegistry:
    def __init__(self, db: AsyncSession, owner_id: Optional[str]):
        self.db = db
        self.owner_id = owner_id

    async def create_board(self, title: Optional[str], raw_slug: Optional[str] = None) -> Optional[Board]:
        if not self.owner_id:
            logger.warning("create_board called without a signed-in user; nothing created")
            return None

        board = Board(
            owner_id=self.owner_id,
            title=title or "Untitled",
            slug=derive_slug(title, raw_slug),
            status="draft",
            visibility="public",
        )
        self.db.add(board)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Board creation failed: {e}", exc_info=True)
            raise MutationError(db_error_message(e))
        await self.db.refresh(board)
        logger.info(f"Board created: {board.id} slug={board.slug}")
        return board

    async def list_boards(self) -> List[Board]:
        if not self.owner_id:
            return []
        try:
            result = await self.db.execute(
                select(Board)
                .where(Board.owner_id == self.owner_id)
                .order_by(Board.updated_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError:
            logger.error("Listing boards failed", exc_info=True)
            return []

    async def get_board(self, board_id: str) -> Optional[Board]:
        if not self.owner_id:
            return None
        result = await self.db.execute(
            select(Board).where(Board.id == board_id, Board.owner_id == self.owner_id)
        )
        return result.scalar_one_or_none()

    async def require_board(self, board_id: str) -> Board:
        board = await self.get_board(board_id)
        if not board:
            raise NotFoundError("Board not found")
        return board

    async def _update(self, board: Board, **values) -> Board:
        for key, value in values.items():
            setattr(board, key, value)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Board {board.id} update failed: {e}", exc_info=True)
            raise MutationError(db_error_message(e))
        await self.db.refresh(board)
        return board

    async def set_status(self, board_id: str, status: str) -> Board:
        if status not in BOARD_STATUSES:
            raise MutationError(f"Invalid status: {status}")
        board = await self.require_board(board_id)
        board = await self._update(board, status=status)
        logger.info(f"Board {board_id} status -> {status}")
        return board

    async def set_background_url(self, board_id: str, url: Optional[str]) -> Board:
        board = await self.require_board(board_id)
        return await self._update(board, background_url=(url or "").strip() or None)


async def get_published_board(db: AsyncSession, slug: str) -> Optional[Board]:
    """Public read: a published, public board by slug (newest wins on slug collisions)."""
    result = await db.execute(
        select(Board)
        .where(
            Board.slug == slug,
            Board.status == "published",
            Board.visibility == "public",
        )
        .order_by(Board.updated_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
