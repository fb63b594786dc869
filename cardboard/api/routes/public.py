from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardboard.core.boards import get_published_board
from cardboard.core.cards import CardRegistry
from cardboard.core.categories import CategoryRegistry
from cardboard.core.errors import NotFoundError
from cardboard.db.session import get_db
from cardboard.schemas.board import PublicBoard

router = APIRouter(prefix="/api/public/boards", tags=["public"])


@router.get("/{slug}", response_model=PublicBoard)
async def get_public_board(slug: str, db: AsyncSession = Depends(get_db)):
    """Read-only view of a published board, no sign-in required."""
    board = await get_published_board(db, slug)
    if not board:
        raise NotFoundError("Board not found")

    # read through the owner's scope; nothing here writes
    categories = CategoryRegistry(db, board.owner_id)
    cards = CardRegistry(db, board.owner_id)
    return {
        "title": board.title,
        "slug": board.slug,
        "background_url": board.background_url,
        "categories": await categories.list_categories(board.id),
        "cards": await cards.list_cards(board.id),
    }
