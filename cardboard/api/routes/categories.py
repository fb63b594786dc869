from typing import List

from fastapi import APIRouter, Depends, status

from cardboard.api.deps import get_card_registry, get_category_registry
from cardboard.core.cards import CardRegistry
from cardboard.core.categories import CategoryRegistry
from cardboard.schemas.board import BoardDetail
from cardboard.schemas.category import CategoryCreate, CategoryRead

router = APIRouter(prefix="/api/boards/{board_id}/categories", tags=["categories"])


@router.get("/", response_model=List[CategoryRead])
async def list_categories(
    board_id: str,
    categories: CategoryRegistry = Depends(get_category_registry),
):
    return await categories.list_categories(board_id)


@router.post("/", response_model=List[CategoryRead], status_code=status.HTTP_201_CREATED)
async def create_category(
    board_id: str,
    data: CategoryCreate,
    categories: CategoryRegistry = Depends(get_category_registry),
):
    """Add a category at the end; a blank title adds nothing."""
    await categories.create_category(board_id, data.title)
    return await categories.list_categories(board_id)


@router.delete("/{category_id}", response_model=BoardDetail)
async def delete_category(
    board_id: str,
    category_id: str,
    categories: CategoryRegistry = Depends(get_category_registry),
    cards: CardRegistry = Depends(get_card_registry),
):
    """Delete a category; its cards stay on the board without a category."""
    board = await categories.boards.require_board(board_id)
    await categories.delete_category(category_id, board_id=board_id)
    return {
        "board": board,
        "categories": await categories.list_categories(board_id),
        "cards": await cards.list_cards(board_id),
    }
