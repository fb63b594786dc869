from uuid import uuid4

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from cardboard.db.base import Base


class Card(Base):
    __tablename__ = "cards"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    board_id = Column(String(36), ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    link_url = Column(String, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)  # gaps are expected after deletes
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    board = relationship("Board", back_populates="cards")
    category = relationship("Category", back_populates="cards")
