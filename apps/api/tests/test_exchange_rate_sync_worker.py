from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import func, select

from xpoints_api.jobs import sync_exchange_rates
from xpoints_api.models.exchange_rate import ExchangeRate
from xpoints_api.workers import ExchangeRateSyncWorker


async def _count_rates(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count(ExchangeRate.id)))).scalar_one()


@pytest.mark.asyncio
async def test_sync_job_is_idempotent(session_factory, reset_conversion_store) -> None:
    first = await sync_exchange_rates(session_factory=session_factory)
    second = await sync_exchange_rates(session_factory=session_factory)

    assert first["pairs"] == 100
    assert second["pairs"] == 100
    assert "synced_at" in second
    assert await _count_rates(session_factory) == 100
    assert reset_conversion_store.snapshot().rate_sync == {"runs": 2, "pairs_written": 200}


@pytest.mark.asyncio
async def test_sync_job_accepts_async_session_factory(session_factory) -> None:
    async def factory():
        return session_factory()

    summary = await sync_exchange_rates(session_factory=factory)

    assert summary["pairs"] == 100


@pytest.mark.asyncio
async def test_worker_run_once(session_factory) -> None:
    worker = ExchangeRateSyncWorker(session_factory, interval_seconds=3600)

    summary = await worker.run_once()

    assert summary["pairs"] == 100
    assert worker.last_summary == summary
    assert await _count_rates(session_factory) == 100


@pytest.mark.asyncio
async def test_worker_start_and_stop(session_factory) -> None:
    worker = ExchangeRateSyncWorker(session_factory, interval_seconds=3600)

    worker.start()
    assert worker.is_running is True
    for _ in range(50):
        if worker.last_summary is not None:
            break
        await asyncio.sleep(0.01)
    await worker.stop()

    assert worker.is_running is False
    assert worker.last_summary is not None
    assert await _count_rates(session_factory) == 100
