from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from cardboard.api.deps import get_blob_store
from cardboard.core.storage import BlobStore

router = APIRouter(prefix="/storage/v1/object/public", tags=["storage"])


@router.get("/{bucket}/{path:path}")
async def download_object(
    bucket: str,
    path: str,
    store: BlobStore = Depends(get_blob_store),
):
    file_path, obj = await store.open(bucket, path)
    return FileResponse(
        file_path,
        media_type=obj.content_type,
        headers={"Cache-Control": f"max-age={obj.cache_control}"},
    )
