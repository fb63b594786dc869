from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from cardboard.db.base import Base

class Board(Base):
    __tablename__ = "boards"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    owner_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, index=True)  # not unique, collisions are tolerated
    status = Column(String, nullable=False, server_default="draft")  # "draft" or "published"
    visibility = Column(String, nullable=False, server_default="public")  # "public" or "private"
    background_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    categories = relationship("Category", back_populates="board", passive_deletes=True)
    cards = relationship("Card", back_populates="board", passive_deletes=True)
