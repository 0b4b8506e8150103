"""Translate point balances into reward options priced for a program.

Every function here is pure: inputs are a balance and a program, the catalog
and rate table are read-only, and nothing is cached or mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Sequence

from xpoints_api.domain.programs import LoyaltyProgram, point_value
from xpoints_api.domain.rewards import STANDARD_REWARDS, RewardCategory, RewardDescriptor


_WHOLE = Decimal("1")
_TENTH = Decimal("0.1")


class RewardOrder(str, Enum):
    """Ordering of priced reward lists."""

    CHEAPEST_FIRST = "cheapest_first"
    BEST_VALUE = "best_value"


@dataclass(frozen=True, slots=True)
class RewardOption:
    """A catalog reward with its points price for a specific program."""

    category: RewardCategory
    description: str
    points_required: int
    cash_value: Decimal


@dataclass(frozen=True, slots=True)
class UpcomingReward:
    option: RewardOption
    points_needed: int
    progress_percent: Decimal


def get_points_dollar_value(points: int, program: LoyaltyProgram | str | None) -> Decimal:
    """Dollar value of ``points`` in ``program`` (exact, no rounding)."""

    return Decimal(points) * point_value(program)


def reward_points_required(reward: RewardDescriptor, program: LoyaltyProgram | str | None) -> int:
    """Points a program charges for ``reward``, rounded half-up to whole points."""

    raw = reward.base_cost_dollars * reward.points_multiplier / point_value(program)
    return int(raw.quantize(_WHOLE, rounding=ROUND_HALF_UP))


def _price(reward: RewardDescriptor, program: LoyaltyProgram | str | None) -> RewardOption:
    return RewardOption(
        category=reward.category,
        description=reward.description,
        points_required=reward_points_required(reward, program),
        cash_value=reward.base_cost_dollars,
    )


def _sort(options: list[RewardOption], order: RewardOrder) -> list[RewardOption]:
    return sorted(
        options,
        key=lambda option: option.points_required,
        reverse=order is RewardOrder.BEST_VALUE,
    )


def price_rewards(
    program: LoyaltyProgram | str | None,
    *,
    category: RewardCategory | None = None,
    balance_cap: int | None = None,
    order: RewardOrder = RewardOrder.BEST_VALUE,
    catalog: Iterable[RewardDescriptor] = STANDARD_REWARDS,
) -> list[RewardOption]:
    """Price the catalog for ``program`` with optional category and balance cap."""

    options = [_price(reward, program) for reward in catalog]
    if category is not None:
        options = [option for option in options if option.category == category]
    if balance_cap is not None:
        options = [option for option in options if option.points_required <= balance_cap]
    return _sort(options, order)


def translate_points(
    points: int,
    program: LoyaltyProgram | str | None,
    *,
    category: RewardCategory | None = None,
    order: RewardOrder = RewardOrder.BEST_VALUE,
    catalog: Iterable[RewardDescriptor] = STANDARD_REWARDS,
) -> list[RewardOption]:
    """Rewards reachable with ``points``; non-positive balances yield nothing."""

    if points <= 0:
        return []
    return price_rewards(
        program,
        category=category,
        balance_cap=points,
        order=order,
        catalog=catalog,
    )


def get_affordable_rewards(
    program: LoyaltyProgram | str | None,
    balance: int,
    *,
    catalog: Iterable[RewardDescriptor] = STANDARD_REWARDS,
) -> list[RewardOption]:
    """Rewards with ``points_required <= balance``, most expensive first."""

    return translate_points(balance, program, order=RewardOrder.BEST_VALUE, catalog=catalog)


def points_needed_for_reward(points: int, option: RewardOption) -> int:
    if points >= option.points_required:
        return 0
    return option.points_required - max(points, 0)


def progress_towards(points: int, option: RewardOption) -> Decimal:
    """Percentage of ``option`` covered by ``points``, capped at 100."""

    if option.points_required <= 0:
        return Decimal("0")
    ratio = Decimal(max(points, 0)) * 100 / Decimal(option.points_required)
    return min(ratio, Decimal("100")).quantize(_TENTH, rounding=ROUND_HALF_UP)


def upcoming_rewards(
    points: int,
    program: LoyaltyProgram | str | None,
    *,
    catalog: Iterable[RewardDescriptor] = STANDARD_REWARDS,
) -> list[UpcomingReward]:
    """Cheapest out-of-reach reward per category, nearest goal first."""

    cheapest_by_category: dict[RewardCategory, RewardOption] = {}
    for option in price_rewards(program, order=RewardOrder.CHEAPEST_FIRST, catalog=catalog):
        if option.points_required <= points:
            continue
        cheapest_by_category.setdefault(option.category, option)

    ranked: Sequence[RewardOption] = _sort(
        list(cheapest_by_category.values()), RewardOrder.CHEAPEST_FIRST
    )
    return [
        UpcomingReward(
            option=option,
            points_needed=points_needed_for_reward(points, option),
            progress_percent=progress_towards(points, option),
        )
        for option in ranked
    ]


def describe_points_value(points: int, program: LoyaltyProgram | str | None) -> str:
    """Short human summary of what a balance is worth."""

    resolved = program.value if isinstance(program, LoyaltyProgram) else str(program or "").upper()
    dollars = int(get_points_dollar_value(points, program).quantize(_WHOLE, rounding=ROUND_HALF_UP))
    label = f"{points:,} {resolved} points"

    if points < 1000:
        return f"Your {label} are worth about ${dollars}, enough for a coffee or a snack."
    if points < 5000:
        return f"With {label} (about ${dollars}) you could cover a nice meal or movie tickets."
    if points < 15000:
        return f"Your {label} are valued around ${dollars}, enough for a quality dinner for two."
    if points < 30000:
        return f"Your {label} are worth approximately ${dollars}, think weekend getaway or a shopping spree."
    if points < 60000:
        return f"With {label} (about ${dollars}) a domestic flight or a short holiday package is within reach."
    return f"Your {label} are worth around ${dollars}, enough for an international flight or a luxury hotel stay."


__all__ = [
    "RewardOption",
    "RewardOrder",
    "UpcomingReward",
    "describe_points_value",
    "get_affordable_rewards",
    "get_points_dollar_value",
    "points_needed_for_reward",
    "price_rewards",
    "progress_towards",
    "reward_points_required",
    "translate_points",
    "upcoming_rewards",
]
