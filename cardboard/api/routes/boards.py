import logging

from fastapi import APIRouter, Depends, status

from cardboard.api.deps import (
    get_board_registry,
    get_card_registry,
    get_category_registry,
)
from cardboard.core.boards import BoardRegistry
from cardboard.core.cards import CardRegistry
from cardboard.core.categories import CategoryRegistry
from cardboard.core.errors import NotAuthenticatedError
from cardboard.schemas.board import (
    BoardBackgroundUpdate,
    BoardCreate,
    BoardDetail,
    BoardList,
    BoardMutation,
    BoardStatusUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/boards", tags=["boards"])


@router.get("/", response_model=BoardList)
async def list_boards(boards: BoardRegistry = Depends(get_board_registry)):
    """List the caller's boards, most recently updated first."""
    return {"boards": await boards.list_boards()}


@router.post("/", response_model=BoardMutation, status_code=status.HTTP_201_CREATED)
async def create_board(
    data: BoardCreate,
    boards: BoardRegistry = Depends(get_board_registry),
):
    board = await boards.create_board(data.title, data.slug)
    if board is None:
        raise NotAuthenticatedError("Not authenticated")
    return {"board": board, "boards": await boards.list_boards()}


@router.get("/{board_id}", response_model=BoardDetail)
async def get_board(
    board_id: str,
    boards: BoardRegistry = Depends(get_board_registry),
    categories: CategoryRegistry = Depends(get_category_registry),
    cards: CardRegistry = Depends(get_card_registry),
):
    """Board editor view: the board with its categories and cards."""
    board = await boards.require_board(board_id)
    return {
        "board": board,
        "categories": await categories.list_categories(board_id),
        "cards": await cards.list_cards(board_id),
    }


@router.patch("/{board_id}/status", response_model=BoardMutation)
async def set_board_status(
    board_id: str,
    data: BoardStatusUpdate,
    boards: BoardRegistry = Depends(get_board_registry),
):
    board = await boards.set_status(board_id, data.status)
    return {"board": board, "boards": await boards.list_boards()}


@router.patch("/{board_id}/background", response_model=BoardMutation)
async def set_board_background(
    board_id: str,
    data: BoardBackgroundUpdate,
    boards: BoardRegistry = Depends(get_board_registry),
):
    board = await boards.set_background_url(board_id, data.background_url)
    return {"board": board, "boards": await boards.list_boards()}
