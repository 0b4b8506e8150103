"""Background workers supporting async processing."""

from .exchange_rate_sync import ExchangeRateSyncWorker

__all__ = ["ExchangeRateSyncWorker"]
