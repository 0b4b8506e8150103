"""Reward catalog pricing and point translation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel

from xpoints_api.domain.programs import LoyaltyProgram
from xpoints_api.domain.rewards import RewardCategory
from xpoints_api.services.rewards import (
    RewardOption,
    RewardOrder,
    describe_points_value,
    get_affordable_rewards,
    get_points_dollar_value,
    price_rewards,
    translate_points,
    upcoming_rewards,
)


router = APIRouter(prefix="/rewards", tags=["Rewards"])


class RewardOptionResponse(BaseModel):
    category: RewardCategory
    description: str
    pointsRequired: int
    cashValue: float


class TranslationResponse(BaseModel):
    program: LoyaltyProgram
    points: int
    dollarValue: float
    rewards: list[RewardOptionResponse]


class UpcomingRewardResponse(BaseModel):
    reward: RewardOptionResponse
    pointsNeeded: int
    progressPercent: float


class PointsValueResponse(BaseModel):
    program: LoyaltyProgram
    points: int
    dollarValue: float
    summary: str


def _serialize_option(option: RewardOption) -> RewardOptionResponse:
    return RewardOptionResponse(
        category=option.category,
        description=option.description,
        pointsRequired=option.points_required,
        cashValue=float(option.cash_value),
    )


@router.get("/catalog", response_model=list[RewardOptionResponse], summary="Reward catalog priced for a program")
async def get_catalog(
    program: LoyaltyProgram = Query(..., description="Program to price the catalog in"),
    category: RewardCategory | None = Query(None, description="Restrict to one reward category"),
    order: RewardOrder = Query(RewardOrder.BEST_VALUE, description="Ordering of the priced catalog"),
) -> list[RewardOptionResponse]:
    return [_serialize_option(option) for option in price_rewards(program, category=category, order=order)]


@router.get("/translate", response_model=TranslationResponse, summary="Rewards reachable with a balance")
async def translate(
    program: LoyaltyProgram = Query(...),
    points: int = Query(..., description="Point balance to translate"),
    category: RewardCategory | None = Query(None),
    order: RewardOrder = Query(RewardOrder.BEST_VALUE),
) -> TranslationResponse:
    options = translate_points(points, program, category=category, order=order)
    return TranslationResponse(
        program=program,
        points=points,
        dollarValue=float(get_points_dollar_value(points, program)),
        rewards=[_serialize_option(option) for option in options],
    )


@router.get("/affordable", response_model=list[RewardOptionResponse], summary="Rewards affordable with a balance")
async def affordable(
    program: LoyaltyProgram = Query(...),
    balance: int = Query(..., description="Current wallet balance"),
) -> list[RewardOptionResponse]:
    return [_serialize_option(option) for option in get_affordable_rewards(program, balance)]


@router.get("/upcoming", response_model=list[UpcomingRewardResponse], summary="Next reward goal per category")
async def upcoming(
    program: LoyaltyProgram = Query(...),
    points: int = Query(..., description="Current point balance"),
) -> list[UpcomingRewardResponse]:
    return [
        UpcomingRewardResponse(
            reward=_serialize_option(goal.option),
            pointsNeeded=goal.points_needed,
            progressPercent=float(goal.progress_percent),
        )
        for goal in upcoming_rewards(points, program)
    ]


@router.get("/value", response_model=PointsValueResponse, summary="Dollar value of a balance")
async def points_value(
    program: LoyaltyProgram = Query(...),
    points: int = Query(..., ge=0),
) -> PointsValueResponse:
    return PointsValueResponse(
        program=program,
        points=points,
        dollarValue=float(get_points_dollar_value(points, program)),
        summary=describe_points_value(points, program),
    )
