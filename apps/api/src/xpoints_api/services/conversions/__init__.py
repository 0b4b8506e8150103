"""Conversion pricing helpers."""

from .calculator import (  # noqa: F401
    DEFAULT_DOLLAR_COEFFICIENT,
    ConversionResult,
    ConversionValidationError,
    ProgramComparison,
    calculate_conversion,
    compare_programs,
    conversion_fee,
)
from xpoints_api.domain.tiers import resolve_tier  # noqa: F401
