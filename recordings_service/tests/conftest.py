import io
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from typing import AsyncGenerator

import pytest
import pytest_asyncio
import httpx
from httpx import AsyncClient
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from models import Base
from database import get_db
from routers.recordings import get_blob_store
from service import RecordingService
from storage import BlobStore

@pytest_asyncio.fixture(scope="function")
async def test_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with TestingSessionLocal() as session:
        yield session
        await session.rollback()

@pytest.fixture(scope="function")
def storage_root(tmp_path) -> Path:
    root = tmp_path / "recordings_test"
    root.mkdir()
    return root

@pytest.fixture(scope="function")
def blob_store(storage_root) -> BlobStore:
    return BlobStore(storage_root, chunk_size=64)

@pytest.fixture(scope="function")
def service(db_session, blob_store) -> RecordingService:
    return RecordingService(db_session, blob_store, extension=".webm")

@pytest_asyncio.fixture(scope="function")
async def async_client(db_session: AsyncSession, blob_store: BlobStore) -> AsyncGenerator[AsyncClient, None]:
    def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    transport = httpx.ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testrecordings") as client:
        yield client

    app.dependency_overrides.clear()

def make_upload(content: bytes, filename: str = "take.webm") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)

async def read_all(chunks) -> bytes:
    return b"".join([chunk async for chunk in chunks])
