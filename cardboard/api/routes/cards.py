import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from cardboard.api.deps import get_card_registry
from cardboard.core.assets import ImageFile
from cardboard.core.cards import CardRegistry
from cardboard.schemas.card import CardList

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/boards/{board_id}/cards", tags=["cards"])


@router.get("/", response_model=CardList)
async def list_cards(
    board_id: str,
    cards: CardRegistry = Depends(get_card_registry),
):
    return {"cards": await cards.list_cards(board_id)}


@router.post("/", response_model=CardList, status_code=status.HTTP_201_CREATED)
async def create_card(
    board_id: str,
    title: str = Form(""),
    description: Optional[str] = Form(None),
    link_url: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    next_index: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    cards: CardRegistry = Depends(get_card_registry),
):
    """
    Create a card at ``next_index`` (the number of cards the client has
    loaded). Without it, the count of cards listed right now is used.
    """
    image_file = None
    if image is not None and image.filename:
        image_file = ImageFile(
            filename=image.filename,
            content_type=image.content_type,
            data=await image.read(),
        )

    if next_index is None:
        next_index = len(await cards.list_cards(board_id))

    await cards.create_card(
        board_id,
        title,
        description=description,
        link_url=link_url,
        category_id=category_id,
        image_file=image_file,
        current_count=next_index,
    )
    return {"cards": await cards.list_cards(board_id)}


@router.delete("/{card_id}", response_model=CardList)
async def delete_card(
    board_id: str,
    card_id: str,
    cards: CardRegistry = Depends(get_card_registry),
):
    await cards.delete_card(card_id, board_id=board_id)
    return {"cards": await cards.list_cards(board_id)}
