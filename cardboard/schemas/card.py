from typing import List, Optional
from pydantic import BaseModel

class CardRead(BaseModel):
    id: str
    board_id: str
    category_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    link_url: Optional[str] = None
    order_index: int

    class Config:
        from_attributes = True

class CardList(BaseModel):
    cards: List[CardRead]
