"""Exchange rate service exports."""

from .service import (  # noqa: F401
    RATE_PRECISION,
    RATE_TABLE_SOURCE,
    ExchangeRateNotFoundError,
    ExchangeRateService,
    ResolvedRate,
    build_verification,
    derive_exchange_rate,
)
