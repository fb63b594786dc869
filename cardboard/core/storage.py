"""Local blob store: one directory per bucket, metadata in ``storage_objects``."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Tuple
from urllib.parse import quote

import aiofiles
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardboard.core.config import PUBLIC_BASE_URL, STORAGE_DIR
from cardboard.core.errors import NotFoundError, UploadError
from cardboard.db.models import StorageObject

logger = logging.getLogger(__name__)


def validate_object_path(bucket: str, path: str) -> None:
    for part in [bucket, *path.split("/")]:
        if not part or part in (".", "..") or "\\" in part:
            raise UploadError(f"Invalid object path: {bucket}/{path}")
    if path.startswith("/"):
        raise UploadError(f"Invalid object path: {bucket}/{path}")


class BlobStore:
    def __init__(self, db: AsyncSession, root: str | Path | None = None):
        self.db = db
        self.root = Path(root or STORAGE_DIR)

    def _file_path(self, bucket: str, path: str) -> Path:
        validate_object_path(bucket, path)
        return self.root / bucket / path

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        cache_control: str = "3600",
        upsert: bool = False,
        content_type: str = "application/octet-stream",
    ) -> str:
        """
        Write an object and record its metadata.

        Without ``upsert`` an existing object at ``path`` is an error and the
        stored bytes are left untouched.
        """
        file_path = self._file_path(bucket, path)

        result = await self.db.execute(
            select(StorageObject).where(
                StorageObject.bucket == bucket, StorageObject.path == path
            )
        )
        existing = result.scalar_one_or_none()
        if existing and not upsert:
            raise UploadError("The resource already exists")

        file_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiofiles.open(file_path, "wb" if upsert else "xb") as f:
                await f.write(data)
        except FileExistsError:
            raise UploadError("The resource already exists")
        except OSError as e:
            logger.error(f"Failed writing {bucket}/{path}: {e}", exc_info=True)
            raise UploadError(str(e))

        try:
            if existing:
                existing.content_type = content_type
                existing.cache_control = cache_control
                existing.size = len(data)
            else:
                self.db.add(
                    StorageObject(
                        bucket=bucket,
                        path=path,
                        content_type=content_type,
                        cache_control=cache_control,
                        size=len(data),
                    )
                )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            if not existing:
                os.remove(file_path)
            logger.error(f"Failed recording {bucket}/{path}: {e}", exc_info=True)
            raise UploadError(str(e))

        logger.info(f"Stored {bucket}/{path} ({len(data)} bytes)")
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{PUBLIC_BASE_URL}/storage/v1/object/public/{quote(bucket)}/{quote(path)}"

    async def open(self, bucket: str, path: str) -> Tuple[Path, StorageObject]:
        try:
            file_path = self._file_path(bucket, path)
        except UploadError:
            raise NotFoundError("Object not found")

        result = await self.db.execute(
            select(StorageObject).where(
                StorageObject.bucket == bucket, StorageObject.path == path
            )
        )
        obj = result.scalar_one_or_none()
        if not obj or not file_path.exists():
            raise NotFoundError("Object not found")
        return file_path, obj
