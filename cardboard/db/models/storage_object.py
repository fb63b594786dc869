from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint, func
from cardboard.db.base import Base


class StorageObject(Base):
    __tablename__ = "storage_objects"

    id = Column(Integer, primary_key=True)
    bucket = Column(String, nullable=False)
    path = Column(String, nullable=False)
    content_type = Column(String, nullable=False)
    cache_control = Column(String, nullable=False)
    size = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("bucket", "path", name="uq_storage_bucket_path"),
    )
