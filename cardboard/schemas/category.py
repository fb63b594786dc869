from pydantic import BaseModel

class CategoryCreate(BaseModel):
    title: str = ""

class CategoryRead(BaseModel):
    id: str
    board_id: str
    title: str
    order_index: int

    class Config:
        from_attributes = True
