from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from cardboard.core.assets import AssetUploader
from cardboard.core.boards import BoardRegistry
from cardboard.core.cards import CardRegistry
from cardboard.core.categories import CategoryRegistry
from cardboard.core.errors import NotAuthenticatedError
from cardboard.core.identity import Identity, Session
from cardboard.core.storage import BlobStore
from cardboard.db.session import get_db

bearer = HTTPBearer(auto_error=False)


def get_identity(db: AsyncSession = Depends(get_db)) -> Identity:
    return Identity(db)


def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_session(
    token: Optional[str] = Depends(get_token),
    identity: Identity = Depends(get_identity),
) -> Session:
    session = await identity.get_session(token)
    if not session:
        raise NotAuthenticatedError("Not authenticated")
    return session


def get_blob_store(db: AsyncSession = Depends(get_db)) -> BlobStore:
    return BlobStore(db)


def get_board_registry(
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session),
) -> BoardRegistry:
    return BoardRegistry(db, session.user_id)


def get_category_registry(
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session),
) -> CategoryRegistry:
    return CategoryRegistry(db, session.user_id)


def get_card_registry(
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session),
    store: BlobStore = Depends(get_blob_store),
) -> CardRegistry:
    return CardRegistry(db, session.user_id, uploader=AssetUploader(store))
