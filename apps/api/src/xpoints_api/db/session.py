"""Async engine and session helpers shared by the API, jobs, and workers."""

from __future__ import annotations

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from xpoints_api.core.settings import settings
from xpoints_api.db.base import Base


engine: AsyncEngine = create_async_engine(settings.database_url, future=True)

async_session = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a request-scoped session."""

    async with async_session() as session:
        yield session


async def create_schema(bind: AsyncEngine | None = None) -> None:
    """Create all tables registered on the declarative metadata."""

    import xpoints_api.models  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
