"""Scheduled job exports."""

from .exchange_rates import sync_exchange_rates  # noqa: F401

__all__ = ["sync_exchange_rates"]
