"""
Snapbook Backend - Test Configuration (conftest.py)
====================================================

Fixtures:
    mock_db_session:  AsyncMock session for pure unit tests
    db_engine:        fresh SQLite (aiosqlite) database per test, schema created
    db_session:       AsyncSession on db_engine for service tests
    temp_storage:     temporary storage root
    jpeg_bytes / png_bytes / heic_bytes: real images generated with Pillow
    test_client:      httpx AsyncClient on the FastAPI app, with
                      get_db_session overridden to use db_engine
    user_headers:     X-User-ID header of the default test user
"""

import io
import os
import tempfile

# Must run before any `app` import: settings are read at import time
_TEST_ROOT = tempfile.mkdtemp(prefix="snapbook_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/app.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_ROOT, "storage")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RETRY_MAX_ATTEMPTS"] = "2"
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["RETRY_MAX_WAIT"] = "0"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401
from app.database import Base, get_db_session

TEST_USER = "user_alice"
OTHER_USER = "user_bob"


def _make_image(fmt: str, **save_kwargs) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (32, 24), color=(200, 40, 90)).save(buf, format=fmt, **save_kwargs)
    return buf.getvalue()


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def jpeg_bytes():
    return _make_image("JPEG", quality=90)


@pytest.fixture
def png_bytes():
    return _make_image("PNG")


@pytest.fixture
def heic_bytes():
    # pillow-heif registers the HEIF encoder with Pillow on import of image_service
    import app.services.image_service  # noqa: F401
    return _make_image("HEIF")


# ══════════════════════════════════════════════════════════════════════════
# Database fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")

    # SQLite only enforces ON DELETE CASCADE with this pragma
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# HTTP fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def user_headers():
    return {"X-User-ID": TEST_USER}


@pytest_asyncio.fixture
async def test_client(session_factory):
    from app.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
