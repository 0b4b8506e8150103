"""Immutable reference data: programs, rate table, reward catalog, tiers."""

from .programs import (  # noqa: F401
    DEFAULT_POINT_VALUE,
    HUB_PROGRAM,
    POINT_VALUES,
    RATE_PRECISION,
    LoyaltyProgram,
    point_value,
    resolve_program,
)
from .rewards import STANDARD_REWARDS, RewardCategory, RewardDescriptor  # noqa: F401
from .tiers import TIER_BENEFITS, MembershipTier, TierBenefit, resolve_tier  # noqa: F401
