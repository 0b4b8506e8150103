"""Worker that periodically refreshes published exchange rates."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from xpoints_api.core.settings import settings
from xpoints_api.jobs.exchange_rates import sync_exchange_rates

SessionFactory = Callable[[], Awaitable[AsyncSession]] | Callable[[], AsyncSession]


class ExchangeRateSyncWorker:
    """Runs the exchange rate sync job on a fixed interval."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        interval_seconds: int | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.interval_seconds = interval_seconds or settings.exchange_rate_sync_interval_seconds
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self.is_running: bool = False
        self.last_summary: Dict[str, Any] | None = None
        self._logger = logger.bind(worker="exchange_rate_sync")

    def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop())
        self.is_running = True
        self._logger.info("Exchange rate sync worker started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        if not self._task:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        self.is_running = False
        self._logger.info("Exchange rate sync worker stopped")

    async def run_once(self) -> Dict[str, Any]:
        summary = await sync_exchange_rates(session_factory=self._session_factory)
        self.last_summary = summary
        return summary

    async def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                summary = await self.run_once()
                self._logger.info("Exchange rate sync iteration", pairs=summary["pairs"])
            except Exception as exc:  # pragma: no cover - logged and retried next interval
                self._logger.exception("Exchange rate sync iteration failed", error=str(exc))
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue


__all__ = ["ExchangeRateSyncWorker"]
