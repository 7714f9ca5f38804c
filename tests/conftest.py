"""Pytest configuration and fixtures."""
import logging
from typing import Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from soundvault.core import database
from soundvault.core.config import app_settings
from soundvault.core.database import get_db
from soundvault.main import app
from soundvault.models import Base, Role
from soundvault.services.account_service import AccountService
from soundvault.storage import BlobStore

API = app_settings.api_prefix

# Small chunks so multi-chunk reads are exercised with tiny payloads
TEST_CHUNK_SIZE = 1024

MP3_BYTES = b"ID3\x03\x00\x00\x00" + bytes(range(256)) * 20
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 300


def pytest_configure(config):
    """Ensure asyncio_mode is auto so async fixtures work outside the project root."""
    if hasattr(config.option, "asyncio_mode") and config.option.asyncio_mode is None:
        config.option.asyncio_mode = "auto"
    logging.getLogger("httpcore").setLevel(logging.CRITICAL)


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database installed into the database module."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    old_engine = database._engine
    old_factory = database._session_factory
    database.use_session_factory(engine, factory)
    try:
        yield factory
    finally:
        database._engine = old_engine
        database._session_factory = old_factory
        await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def blob_store(session_factory):
    return BlobStore(session_factory, chunk_size=TEST_CHUNK_SIZE)


@pytest_asyncio.fixture
async def client(session_factory, blob_store):
    """Async test client; every request gets its own session from the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.blob_store = blob_store
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


# -----------------------------------------------------------------------------
# Helpers for authenticated requests
# -----------------------------------------------------------------------------

def session_headers(response) -> Dict[str, str]:
    """Cookie header carrying the session established by ``response``."""
    token = response.cookies.get(app_settings.session_cookie_name)
    assert token, "response did not set a session cookie"
    return {"Cookie": f"{app_settings.session_cookie_name}={token}"}


async def signup(client: AsyncClient, username: str, email: Optional[str] = None, password: str = "secret1"):
    response = await client.post(
        f"{API}/auth/signup",
        json={"username": username, "email": email or f"{username}@example.com", "password": password},
    )
    client.cookies.clear()
    return response


async def login(client: AsyncClient, email: str, password: str):
    response = await client.post(f"{API}/auth/login", json={"email": email, "password": password})
    client.cookies.clear()
    return response


async def upload_song(
    client: AsyncClient,
    headers: Dict[str, str],
    title: str = "Blue in Green",
    artist: str = "Miles Davis",
    genre: str = "Jazz",
    audio: Optional[tuple] = ("track.mp3", MP3_BYTES, "audio/mpeg"),
    cover: Optional[tuple] = None,
    path: str = "/songs/upload",
    **fields,
):
    files = {}
    if audio is not None:
        files["audioFile"] = audio
    if cover is not None:
        files["coverImage"] = cover
    data = {"title": title, "artist": artist, "genre": genre, **fields}
    return await client.post(f"{API}{path}", data=data, files=files or None, headers=headers)


@pytest_asyncio.fixture
async def user_headers(client):
    response = await signup(client, "alice", "alice@example.com")
    assert response.status_code == 201
    return session_headers(response)


@pytest_asyncio.fixture
async def other_headers(client):
    response = await signup(client, "bob", "bob@example.com")
    assert response.status_code == 201
    return session_headers(response)


@pytest_asyncio.fixture
async def admin_headers(client, session_factory):
    async with session_factory() as session:
        await AccountService(session).signup("root", "root@example.com", "rootpass1", role=Role.ADMIN)
    response = await login(client, "root@example.com", "rootpass1")
    assert response.status_code == 200
    return session_headers(response)


async def read_blob(blob_store, namespace, blob_id) -> bytes:
    """Drain a blob's download stream into memory."""
    stream = await blob_store.open_download_stream(namespace, blob_id)
    return b"".join([chunk async for chunk in stream])
