"""Card registry."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardboard.core.assets import AssetUploader, ImageFile
from cardboard.core.boards import BoardRegistry
from cardboard.core.categories import CategoryRegistry
from cardboard.core.errors import MutationError, NotFoundError, db_error_message
from cardboard.db.models import Board, Card

logger = logging.getLogger(__name__)

_HAS_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def normalize_link(value: Optional[str]) -> Optional[str]:
    """Trim and prepend ``https://`` when no http(s) scheme is present; blank means no link."""
    link = (value or "").strip()
    if not link:
        return None
    if not _HAS_SCHEME.match(link):
        link = f"https://{link}"
    return link


class CardRegistry:
    def __init__(
        self,
        db: AsyncSession,
        owner_id: Optional[str],
        uploader: Optional[AssetUploader] = None,
    ):
        self.db = db
        self.owner_id = owner_id
        self.uploader = uploader
        self.boards = BoardRegistry(db, owner_id)
        self.categories = CategoryRegistry(db, owner_id)

    def _scoped(self, stmt):
        return stmt.join(Board, Board.id == Card.board_id).where(
            Board.owner_id == self.owner_id
        )

    async def list_cards(self, board_id: str) -> List[Card]:
        try:
            result = await self.db.execute(
                self._scoped(select(Card))
                .where(Card.board_id == board_id)
                .order_by(Card.order_index.asc(), Card.created_at.asc())
                .execution_options(populate_existing=True)
            )
            return list(result.scalars().all())
        except SQLAlchemyError:
            logger.error(f"Listing cards for board {board_id} failed", exc_info=True)
            return []

    async def create_card(
        self,
        board_id: str,
        title: Optional[str],
        description: Optional[str] = None,
        link_url: Optional[str] = None,
        category_id: Optional[str] = None,
        image_file: Optional[ImageFile] = None,
        current_count: int = 0,
    ) -> Card:
        """
        Create a card at position ``current_count``.

        The image, when given, is uploaded first; an upload failure raises
        before any card row is written. ``current_count`` is the number of
        cards the caller has loaded, so concurrent creators can end up with
        the same order_index.
        """
        await self.boards.require_board(board_id)

        if category_id:
            category = await self.categories.get_category(category_id)
            if not category or category.board_id != board_id:
                raise MutationError("Category does not belong to this board")

        image_url = None
        if image_file is not None:
            if self.uploader is None:
                raise MutationError("Image uploads are not configured")
            image_url = await self.uploader.upload(board_id, image_file)

        card = Card(
            board_id=board_id,
            category_id=category_id or None,
            title=title or "Untitled card",
            description=description or "",
            image_url=image_url,
            link_url=normalize_link(link_url),
            order_index=current_count,
        )
        self.db.add(card)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Card creation failed: {e}", exc_info=True)
            raise MutationError(db_error_message(e))
        await self.db.refresh(card)
        logger.info(f"Card created: {card.id} on board {board_id} at {card.order_index}")
        return card

    async def delete_card(self, card_id: str, board_id: Optional[str] = None) -> None:
        """Hard delete; the remaining cards keep their order_index."""
        stmt = self._scoped(select(Card)).where(Card.id == card_id)
        if board_id is not None:
            stmt = stmt.where(Card.board_id == board_id)
        result = await self.db.execute(stmt)
        if not result.scalar_one_or_none():
            raise NotFoundError("Card not found")
        try:
            await self.db.execute(delete(Card).where(Card.id == card_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Card {card_id} delete failed: {e}", exc_info=True)
            raise MutationError(db_error_message(e))
        logger.info(f"Card deleted: {card_id}")
