import os

# Settings are read once at import time; point them at test values first.
os.environ.setdefault("VIDTUBE_DATABASE_DSN", "sqlite+aiosqlite://")
os.environ.setdefault("VIDTUBE_BCRYPT_ROUNDS", "4")
os.environ.setdefault("VIDTUBE_ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("VIDTUBE_REFRESH_TOKEN_SECRET", "test-refresh-secret")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vidtube.core.database import Base, get_db
from vidtube.main import app
from vidtube.models import models  # noqa: F401
from vidtube.services.media.media_store import MediaUploadError, get_media_store


class FakeMediaStore:
    """In-memory stand-in for MinIO; folders listed in ``failing`` refuse uploads."""

    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.failing = set()

    async def upload(self, data, filename, content_type=None, folder="uploads"):
        if folder in self.failing:
            raise MediaUploadError(f"simulated outage while storing {filename!r}")
        url = f"https://media.test/{folder}/{len(self.objects)}-{filename}"
        self.objects[url] = data
        return url

    async def delete(self, url):
        self.deleted.append(url)
        self.objects.pop(url, None)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'vidtube.db'}")
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
def media():
    return FakeMediaStore()


@pytest_asyncio.fixture
async def client(session_factory, media):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_store] = lambda: media

    # Plain http: the client's cookie jar never replays the Secure session
    # cookies, so every test states exactly which credentials it sends.
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()
