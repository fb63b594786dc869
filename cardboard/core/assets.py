"""Card image uploads."""

from __future__ import annotations

import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

from cardboard.core.config import CARD_IMAGE_CACHE_CONTROL, CARD_IMAGES_BUCKET
from cardboard.core.errors import UploadError
from cardboard.core.storage import BlobStore

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "png"
DEFAULT_CONTENT_TYPE = "image/png"
# what browsers send when they can't name the type (HEIC, some WebP)
UNDECLARED_CONTENT_TYPES = ("", "application/octet-stream")


def resolve_content_type(declared: Optional[str]) -> str:
    """Declared MIME type, or ``image/png`` when the client did not name one."""
    content_type = (declared or "").split(";", 1)[0].strip().lower()
    if content_type in UNDECLARED_CONTENT_TYPES:
        return DEFAULT_CONTENT_TYPE
    return content_type


@dataclass
class ImageFile:
    filename: str
    content_type: Optional[str]
    data: bytes


def file_extension(filename: Optional[str]) -> str:
    """Lowercased extension of ``filename``, ``png`` when it has none."""
    name = PurePosixPath((filename or "").replace("\\", "/")).name
    if "." not in name:
        return DEFAULT_EXTENSION
    ext = re.sub(r"[^a-z0-9]", "", name.rsplit(".", 1)[-1].lower())
    return ext or DEFAULT_EXTENSION


def build_object_path(board_id: str, filename: Optional[str]) -> str:
    millis = int(time.time() * 1000)
    return f"{board_id}/{millis}-{secrets.token_hex(6)}.{file_extension(filename)}"


class AssetUploader:
    def __init__(self, store: BlobStore, bucket: str = CARD_IMAGES_BUCKET):
        self.store = store
        self.bucket = bucket

    async def upload(self, board_id: str, file: ImageFile) -> str:
        """Store ``file`` under the board's folder and return its public URL."""
        content_type = resolve_content_type(file.content_type)
        # served back with this type from our own origin
        if not content_type.startswith("image/"):
            raise UploadError("Only image uploads are supported.")

        path = build_object_path(board_id, file.filename)
        await self.store.upload(
            self.bucket,
            path,
            file.data,
            cache_control=CARD_IMAGE_CACHE_CONTROL,
            upsert=False,
            content_type=content_type,
        )
        logger.info(f"Uploaded image for board {board_id}: {path}")
        return self.store.get_public_url(self.bucket, path)
