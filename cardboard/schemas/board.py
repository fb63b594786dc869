from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel

from cardboard.schemas.category import CategoryRead
from cardboard.schemas.card import CardRead

BoardStatus = Literal["draft", "published"]
BoardVisibility = Literal["public", "private"]

class BoardCreate(BaseModel):
    title: str = ""
    slug: Optional[str] = None

class BoardStatusUpdate(BaseModel):
    status: BoardStatus

class BoardBackgroundUpdate(BaseModel):
    background_url: Optional[str] = None

class BoardRead(BaseModel):
    id: str
    owner_id: str
    title: str
    slug: str
    status: BoardStatus
    visibility: BoardVisibility
    background_url: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BoardList(BaseModel):
    boards: List[BoardRead]

class BoardDetail(BaseModel):
    board: BoardRead
    categories: List[CategoryRead]
    cards: List[CardRead]

class BoardMutation(BaseModel):
    board: BoardRead
    boards: List[BoardRead]

class PublicBoard(BaseModel):
    title: str
    slug: str
    background_url: Optional[str] = None
    categories: List[CategoryRead]
    cards: List[CardRead]
