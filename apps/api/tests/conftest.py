import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine


def _configure_path() -> None:
    src_path = Path(__file__).resolve().parents[1] / "src"
    if src_path.exists():
        sys.path.insert(0, str(src_path))


_configure_path()

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TRACING_ENABLED", "false")
os.environ.setdefault("EXCHANGE_RATE_SYNC_ON_STARTUP", "false")

from xpoints_api.app import create_app  # noqa: E402
from xpoints_api.db.base import Base  # noqa: E402
from xpoints_api.db.session import get_session  # noqa: E402
from xpoints_api.observability.conversions import get_conversion_store  # noqa: E402
from xpoints_api.services.exchange_rates import ExchangeRateService  # noqa: E402
import xpoints_api.models  # noqa: E402,F401


@pytest.fixture(autouse=True)
def reset_conversion_store():
    store = get_conversion_store()
    store.reset()
    yield store
    store.reset()


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    try:
        yield factory
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def seeded_session_factory(session_factory):
    async with session_factory() as session:
        await ExchangeRateService(session).sync_published_rates()
        await session.commit()
    return session_factory


@pytest_asyncio.fixture
async def app_with_db(seeded_session_factory):
    app = create_app()

    async def override_get_session():
        async with seeded_session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    try:
        yield app, seeded_session_factory
    finally:
        app.dependency_overrides.clear()
