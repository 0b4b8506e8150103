"""Pure conversion arithmetic shared by quote previews and committed conversions."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from xpoints_api.domain.programs import RATE_PRECISION, LoyaltyProgram, point_value
from xpoints_api.domain.tiers import TIER_BENEFITS, MembershipTier


DEFAULT_DOLLAR_COEFFICIENT = Decimal("0.015")

_WHOLE = Decimal("1")
_CENTS = Decimal("0.01")

Numeric = Union[int, float, str, Decimal]


class ConversionValidationError(ValueError):
    """Raised when a conversion request cannot be priced."""


@dataclass(frozen=True, slots=True)
class ConversionResult:
    amount: int
    fee: int
    net_amount: int
    rate: Decimal
    converted_amount: int
    estimated_value: Decimal


@dataclass(frozen=True, slots=True)
class ProgramComparison:
    from_program: LoyaltyProgram
    to_program: LoyaltyProgram
    offered_rate: Decimal
    value_ratio: Decimal
    is_favorable: bool
    difference_percent: Decimal
    recommendation: str


def _to_decimal(value: Numeric, field: str) -> Decimal:
    if isinstance(value, bool):
        raise ConversionValidationError(f"{field} must be numeric")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ConversionValidationError(f"{field} must be numeric") from exc
    if not result.is_finite():
        raise ConversionValidationError(f"{field} must be finite")
    return result


def _whole_points(value: Numeric, field: str) -> int:
    number = _to_decimal(value, field)
    if number != number.to_integral_value():
        raise ConversionValidationError(f"{field} must be a whole number of points")
    return int(number)


def calculate_conversion(
    amount: Numeric,
    rate: Numeric,
    *,
    fee: Numeric = 0,
    dollar_coefficient: Numeric = DEFAULT_DOLLAR_COEFFICIENT,
) -> ConversionResult:
    """Destination points for ``amount`` at ``rate`` after deducting ``fee``.

    Destination points are truncated to whole points; the dollar estimate is
    rounded half-up to cents.
    """

    points = _whole_points(amount, "amount")
    if points <= 0:
        raise ConversionValidationError("Amount must be greater than zero")
    applied_rate = _to_decimal(rate, "rate")
    if applied_rate <= 0:
        raise ConversionValidationError("Exchange rate must be greater than zero")
    fee_points = _whole_points(fee, "fee")
    if fee_points < 0:
        raise ConversionValidationError("Fee cannot be negative")
    net_amount = points - fee_points
    if net_amount <= 0:
        raise ConversionValidationError("Conversion fee exceeds the amount being converted")
    coefficient = _to_decimal(dollar_coefficient, "dollar_coefficient")
    if coefficient <= 0:
        raise ConversionValidationError("dollar_coefficient must be greater than zero")

    converted = int((Decimal(net_amount) * applied_rate).to_integral_value(rounding=ROUND_DOWN))
    if converted <= 0:
        raise ConversionValidationError("Amount too small to convert")
    estimated = (Decimal(converted) * coefficient).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return ConversionResult(
        amount=points,
        fee=fee_points,
        net_amount=net_amount,
        rate=applied_rate,
        converted_amount=converted,
        estimated_value=estimated,
    )


def conversion_fee(amount: int, tier: MembershipTier = MembershipTier.STANDARD) -> int:
    """Fee in source points charged above the tier's free conversion limit."""

    benefit = TIER_BENEFITS[tier]
    excess = amount - benefit.free_conversion_limit
    if excess <= 0:
        return 0
    return int((Decimal(excess) * benefit.conversion_fee_rate).quantize(_WHOLE, rounding=ROUND_HALF_UP))


def compare_programs(
    from_program: LoyaltyProgram,
    to_program: LoyaltyProgram,
    rate: Numeric,
) -> ProgramComparison:
    """Judge an offered rate against the relative dollar value of two programs."""

    offered = _to_decimal(rate, "rate")
    if offered <= 0:
        raise ConversionValidationError("Exchange rate must be greater than zero")
    # Judged at published-rate precision.
    value_ratio = (point_value(from_program) / point_value(to_program)).quantize(
        RATE_PRECISION, rounding=ROUND_HALF_UP
    )
    difference = ((offered / value_ratio - 1) * 100).quantize(_CENTS, rounding=ROUND_HALF_UP)
    if difference == 0:
        difference = abs(difference)
    is_favorable = difference > 0

    if is_favorable:
        recommendation = (
            f"Converting {from_program.value} to {to_program.value} is favorable "
            f"({difference}% better than market value)."
        )
    elif difference == 0:
        recommendation = (
            f"Converting {from_program.value} to {to_program.value} matches market value."
        )
    else:
        recommendation = (
            f"Converting {from_program.value} to {to_program.value} is unfavorable "
            f"({-difference}% worse than market value)."
        )
    return ProgramComparison(
        from_program=from_program,
        to_program=to_program,
        offered_rate=offered,
        value_ratio=value_ratio,
        is_favorable=is_favorable,
        difference_percent=difference,
        recommendation=recommendation,
    )


__all__ = [
    "ConversionResult",
    "ConversionValidationError",
    "DEFAULT_DOLLAR_COEFFICIENT",
    "ProgramComparison",
    "calculate_conversion",
    "compare_programs",
    "conversion_fee",
]
