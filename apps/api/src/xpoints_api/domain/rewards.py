"""Static reward catalog priced in dollars."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Tuple


class RewardCategory(str, Enum):
    FLIGHT = "flight"
    HOTEL = "hotel"
    DINING = "dining"
    SHOPPING = "shopping"
    EXPERIENCE = "experience"


@dataclass(frozen=True, slots=True)
class RewardDescriptor:
    """Redeemable item with a baseline dollar cost.

    ``points_multiplier`` scales the points a program charges for this item
    relative to its dollar cost (1 means priced at face value).
    """

    category: RewardCategory
    description: str
    base_cost_dollars: Decimal
    points_multiplier: Decimal = Decimal("1")

    def __post_init__(self) -> None:
        if self.base_cost_dollars <= 0:
            raise ValueError("base_cost_dollars must be positive")
        if self.points_multiplier <= 0:
            raise ValueError("points_multiplier must be positive")


STANDARD_REWARDS: Tuple[RewardDescriptor, ...] = (
    RewardDescriptor(RewardCategory.FLIGHT, "A domestic one-way flight", Decimal("250")),
    RewardDescriptor(RewardCategory.FLIGHT, "A return trip to Bali", Decimal("800")),
    RewardDescriptor(RewardCategory.HOTEL, "One night at a luxury hotel", Decimal("400")),
    RewardDescriptor(RewardCategory.HOTEL, "A weekend getaway (2 nights)", Decimal("600")),
    RewardDescriptor(RewardCategory.DINING, "A fancy dinner for two", Decimal("150")),
    RewardDescriptor(RewardCategory.DINING, "A free lunch", Decimal("30")),
    RewardDescriptor(RewardCategory.SHOPPING, "A $100 shopping voucher", Decimal("100")),
    RewardDescriptor(RewardCategory.SHOPPING, "A new premium smartphone", Decimal("1000")),
    RewardDescriptor(RewardCategory.EXPERIENCE, "Movie tickets for two", Decimal("40")),
    RewardDescriptor(RewardCategory.EXPERIENCE, "A hot air balloon ride", Decimal("350")),
)


__all__ = ["RewardCategory", "RewardDescriptor", "STANDARD_REWARDS"]
