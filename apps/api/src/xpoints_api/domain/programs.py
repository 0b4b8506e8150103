"""Loyalty program identifiers and the canonical dollars-per-point rate table.

The table is built once at import time and exposed read-only, so any number of
request handlers can consult it without coordination.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class LoyaltyProgram(str, Enum):
    """Loyalty schemes supported by the exchange."""

    XPOINTS = "XPOINTS"
    QANTAS = "QANTAS"
    GYG = "GYG"
    VELOCITY = "VELOCITY"
    AMEX = "AMEX"
    FLYBUYS = "FLYBUYS"
    HILTON = "HILTON"
    MARRIOTT = "MARRIOTT"
    AIRBNB = "AIRBNB"
    DELTA = "DELTA"


HUB_PROGRAM = LoyaltyProgram.XPOINTS

DEFAULT_POINT_VALUE = Decimal("0.01")

RATE_PRECISION = Decimal("0.000001")

POINT_VALUES: Mapping[LoyaltyProgram, Decimal] = MappingProxyType(
    {
        LoyaltyProgram.XPOINTS: Decimal("0.01"),
        LoyaltyProgram.QANTAS: Decimal("0.006"),
        LoyaltyProgram.GYG: Decimal("0.008"),
        LoyaltyProgram.VELOCITY: Decimal("0.007"),
        LoyaltyProgram.AMEX: Decimal("0.009"),
        LoyaltyProgram.FLYBUYS: Decimal("0.005"),
        LoyaltyProgram.HILTON: Decimal("0.004"),
        LoyaltyProgram.MARRIOTT: Decimal("0.006"),
        LoyaltyProgram.AIRBNB: Decimal("0.0095"),
        LoyaltyProgram.DELTA: Decimal("0.0065"),
    }
)


def resolve_program(value: LoyaltyProgram | str | None) -> LoyaltyProgram | None:
    """Normalize a program code, returning ``None`` for unknown identifiers."""

    if value is None:
        return None
    if isinstance(value, LoyaltyProgram):
        return value
    try:
        return LoyaltyProgram(str(value).strip().upper())
    except ValueError:
        return None


def point_value(program: LoyaltyProgram | str | None) -> Decimal:
    """Dollars represented by one point; unknown programs use the default."""

    resolved = resolve_program(program)
    if resolved is None:
        return DEFAULT_POINT_VALUE
    return POINT_VALUES.get(resolved, DEFAULT_POINT_VALUE)


__all__ = [
    "DEFAULT_POINT_VALUE",
    "HUB_PROGRAM",
    "LoyaltyProgram",
    "POINT_VALUES",
    "RATE_PRECISION",
    "point_value",
    "resolve_program",
]
