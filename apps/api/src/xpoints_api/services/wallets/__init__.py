"""Wallet service exports."""

from .service import (  # noqa: F401
    ConversionQuote,
    ConversionReceipt,
    InsufficientBalanceError,
    LinkedAccountResult,
    WalletNotFoundError,
    WalletService,
    WalletServiceError,
)
