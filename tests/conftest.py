"""Shared fixtures: a fresh SQLite database and blob directory per test."""

import os
import tempfile

# must be set before cardboard.core.config is imported
_TMP = tempfile.mkdtemp(prefix="cardboard-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP}/app.db")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("STORAGE_DIR", os.path.join(_TMP, "storage"))
os.environ.setdefault("PUBLIC_BASE_URL", "http://test")

import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from cardboard.api.deps import get_blob_store
from cardboard.core.identity import AuthEventHub, Identity
from cardboard.core.storage import BlobStore
from cardboard.db import models  # noqa: F401
from cardboard.db.base import Base
from cardboard.db.session import enable_sqlite_foreign_keys, get_db
from cardboard.main import app


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def hub() -> AuthEventHub:
    return AuthEventHub()


@pytest.fixture
def identity(db, hub) -> Identity:
    return Identity(db, hub=hub)


@pytest_asyncio.fixture
async def owner(identity):
    return await identity.sign_up("owner@example.com", "secret123")


@pytest_asyncio.fixture
async def other_owner(identity):
    return await identity.sign_up("other@example.com", "secret123")


@pytest.fixture
def blob_store(db, tmp_path) -> BlobStore:
    return BlobStore(db, root=tmp_path / "storage")


@pytest_asyncio.fixture
async def client(session_factory, tmp_path):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    def override_blob_store(db: AsyncSession = Depends(get_db)) -> BlobStore:
        return BlobStore(db, root=tmp_path / "storage")

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = override_blob_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
