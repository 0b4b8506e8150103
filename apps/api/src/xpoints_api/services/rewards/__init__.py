"""Reward translation exports."""

from .translator import (  # noqa: F401
    RewardOption,
    RewardOrder,
    UpcomingReward,
    describe_points_value,
    get_affordable_rewards,
    get_points_dollar_value,
    points_needed_for_reward,
    price_rewards,
    progress_towards,
    reward_points_required,
    translate_points,
    upcoming_rewards,
)
