"""SQLAlchemy models package."""

from .exchange_rate import ExchangeRate  # noqa: F401
from .transaction import ConversionStatusEnum, ConversionTransaction  # noqa: F401
from .wallet import Wallet  # noqa: F401
