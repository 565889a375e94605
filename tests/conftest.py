import os
import tempfile
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Optional overrides for local runs; the database is always in-memory SQLite
env_test_path = os.path.join(os.path.dirname(__file__), "..", ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="tapp-uploads-")
os.environ["PUBLIC_BASE_URL"] = "https://tapp.test"
os.environ["YANDEX_MAPS_API_KEY"] = ""
os.environ["YANDEX_DELIVERY_TOKEN"] = ""
os.environ["RESEND_API_KEY"] = ""

from httpx import ASGITransport, AsyncClient  # noqa: E402
from libs.db.base import Base  # noqa: E402
from libs.db.config import enable_sqlite_foreign_keys  # noqa: E402
from libs.db.session import get_async_db  # noqa: E402
from services.storefront_service import models as _models  # noqa: E402, F401
from services.storefront_service.app.main import app  # noqa: E402
from services.storefront_service.services.pixels import (  # noqa: E402
    init_pixel_registry,
    teardown_pixel_registry,
)
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory database per test.

    StaticPool keeps the single connection alive so every session sees the
    same database; the pragma makes SQLite honour ON DELETE CASCADE.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Session for seeding and inspecting data.

    Requests get their own sessions, so call ``expire_all()`` before reading
    back rows an endpoint has changed.
    """
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the app, one database session per request.
    """

    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_db] = _get_test_db
    # ASGITransport does not run the lifespan
    init_pixel_registry()

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
    teardown_pixel_registry()
