"""Category registry: ordered groupings of cards inside a board."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardboard.core.boards import BoardRegistry
from cardboard.core.errors import MutationError, NotFoundError, db_error_message
from cardboard.db.models import Board, Category

logger = logging.getLogger(__name__)


class CategoryRegistry:
    def __init__(self, db: AsyncSession, owner_id: Optional[str]):
        self.db = db
        self.owner_id = owner_id
        self.boards = BoardRegistry(db, owner_id)

    def _scoped(self, stmt):
        return stmt.join(Board, Board.id == Category.board_id).where(
            Board.owner_id == self.owner_id
        )

    async def list_categories(self, board_id: str) -> List[Category]:
        try:
            result = await self.db.execute(
                self._scoped(select(Category))
                .where(Category.board_id == board_id)
                .order_by(Category.order_index.asc(), Category.created_at.asc(), Category.id.asc())
                .execution_options(populate_existing=True)
            )
            return list(result.scalars().all())
        except SQLAlchemyError:
            logger.error(f"Listing categories for board {board_id} failed", exc_info=True)
            return []

    async def create_category(self, board_id: str, title: Optional[str]) -> Optional[Category]:
        title = (title or "").strip()
        if not title:
            return None

        await self.boards.require_board(board_id)
        # count of what the owner currently sees, not a server-side sequence
        order_index = len(await self.list_categories(board_id))

        category = Category(board_id=board_id, title=title, order_index=order_index)
        self.db.add(category)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Category creation failed: {e}", exc_info=True)
            raise MutationError(db_error_message(e))
        await self.db.refresh(category)
        return category

    async def get_category(self, category_id: str) -> Optional[Category]:
        result = await self.db.execute(
            self._scoped(select(Category)).where(Category.id == category_id)
        )
        return result.scalar_one_or_none()

    async def delete_category(self, category_id: str, board_id: Optional[str] = None) -> None:
        """
        Delete the category row only; the database clears ``cards.category_id``.

        With ``board_id``, a category that lives on another board is not found.
        """
        category = await self.get_category(category_id)
        if not category or (board_id is not None and category.board_id != board_id):
            raise NotFoundError("Category not found")
        try:
            await self.db.execute(delete(Category).where(Category.id == category_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Category {category_id} delete failed: {e}", exc_info=True)
            raise MutationError(db_error_message(e))
        logger.info(f"Category deleted: {category_id}")
