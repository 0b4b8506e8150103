"""Membership tiers and the conversion fee schedule attached to each."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class MembershipTier(str, Enum):
    STANDARD = "STANDARD"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"


@dataclass(frozen=True, slots=True)
class TierBenefit:
    tier: MembershipTier
    monthly_points_threshold: int
    free_conversion_limit: int
    conversion_fee_rate: Decimal


TIER_BENEFITS: Mapping[MembershipTier, TierBenefit] = MappingProxyType(
    {
        MembershipTier.STANDARD: TierBenefit(MembershipTier.STANDARD, 0, 10_000, Decimal("0.005")),
        MembershipTier.SILVER: TierBenefit(MembershipTier.SILVER, 20_000, 20_000, Decimal("0.0045")),
        MembershipTier.GOLD: TierBenefit(MembershipTier.GOLD, 50_000, 50_000, Decimal("0.0035")),
        MembershipTier.PLATINUM: TierBenefit(MembershipTier.PLATINUM, 100_000, 100_000, Decimal("0.0025")),
    }
)


def resolve_tier(monthly_points_converted: int | Decimal) -> MembershipTier:
    """Highest tier whose monthly threshold has been reached."""

    volume = Decimal(monthly_points_converted or 0)
    eligible = [
        benefit for benefit in TIER_BENEFITS.values() if benefit.monthly_points_threshold <= volume
    ]
    if not eligible:
        return MembershipTier.STANDARD
    return max(eligible, key=lambda benefit: benefit.monthly_points_threshold).tier


__all__ = ["MembershipTier", "TIER_BENEFITS", "TierBenefit", "resolve_tier"]
