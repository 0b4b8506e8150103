"""Job that republishes exchange rates from the canonical rate table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from xpoints_api.observability.conversions import get_conversion_store
from xpoints_api.services.exchange_rates import ExchangeRateService


SessionFactory = Callable[[], AsyncSession] | Callable[[], Awaitable[AsyncSession]]


async def sync_exchange_rates(*, session_factory: SessionFactory) -> Dict[str, Any]:
    """Upsert every published program pair and report what was written."""

    maybe_session = session_factory()
    session = maybe_session if isinstance(maybe_session, AsyncSession) else await maybe_session
    store = get_conversion_store()
    synced_at = datetime.now(timezone.utc)

    async with session as managed_session:
        service = ExchangeRateService(managed_session)
        try:
            pairs = await service.sync_published_rates(now=synced_at)
            await managed_session.commit()
        except Exception:
            await managed_session.rollback()
            store.record_rate_sync(0, failed=True)
            raise

    store.record_rate_sync(pairs)
    summary = {"pairs": pairs, "synced_at": synced_at.isoformat()}
    logger.bind(rate_sync=summary).info("Exchange rate sync completed")
    return summary


__all__ = ["sync_exchange_rates"]
