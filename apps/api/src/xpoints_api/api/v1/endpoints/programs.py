"""Loyalty program rate table."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from xpoints_api.domain.programs import HUB_PROGRAM, POINT_VALUES, LoyaltyProgram


router = APIRouter(prefix="/programs", tags=["Programs"])


class ProgramResponse(BaseModel):
    program: LoyaltyProgram
    pointValue: str
    isHub: bool


@router.get("", response_model=list[ProgramResponse], summary="List supported programs and point values")
async def list_programs() -> list[ProgramResponse]:
    return [
        ProgramResponse(program=program, pointValue=str(value), isHub=program == HUB_PROGRAM)
        for program, value in POINT_VALUES.items()
    ]
