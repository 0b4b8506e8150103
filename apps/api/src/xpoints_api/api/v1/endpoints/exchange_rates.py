"""Published exchange rate endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from xpoints_api.api.dependencies.security import require_admin_api_key
from xpoints_api.db.session import get_session
from xpoints_api.domain.programs import LoyaltyProgram
from xpoints_api.models.exchange_rate import ExchangeRate
from xpoints_api.observability.conversions import get_conversion_store
from xpoints_api.services.conversions import ConversionValidationError, compare_programs
from xpoints_api.services.exchange_rates import ExchangeRateService


router = APIRouter(prefix="/exchange-rates", tags=["Exchange rates"])


class ExchangeRateResponse(BaseModel):
    fromProgram: LoyaltyProgram
    toProgram: LoyaltyProgram
    rate: str
    source: str
    verification: dict[str, Any]
    updatedAt: datetime | None


class ProgramComparisonResponse(BaseModel):
    fromProgram: LoyaltyProgram
    toProgram: LoyaltyProgram
    offeredRate: str
    valueRatio: str
    isFavorable: bool
    differencePercent: float
    recommendation: str


class RateSyncResponse(BaseModel):
    pairs: int


def format_rate(value: Decimal | float | str) -> str:
    return f"{Decimal(str(value)):.6f}"


def _serialize_rate(record: ExchangeRate) -> ExchangeRateResponse:
    return ExchangeRateResponse(
        fromProgram=record.from_program,
        toProgram=record.to_program,
        rate=format_rate(record.rate),
        source=record.source,
        verification=dict(record.verification or {}),
        updatedAt=record.updated_at,
    )


@router.get("", response_model=ExchangeRateResponse, summary="Published rate for a program pair")
async def get_exchange_rate(
    from_program: LoyaltyProgram = Query(..., alias="from"),
    to_program: LoyaltyProgram = Query(..., alias="to"),
    session: AsyncSession = Depends(get_session),
) -> ExchangeRateResponse:
    record = await ExchangeRateService(session).get_rate(from_program, to_program)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exchange rate not found")
    return _serialize_rate(record)


@router.get("/all", response_model=list[ExchangeRateResponse], summary="Every published rate")
async def list_exchange_rates(session: AsyncSession = Depends(get_session)) -> list[ExchangeRateResponse]:
    records = await ExchangeRateService(session).list_rates()
    return [_serialize_rate(record) for record in records]


@router.get("/compare", response_model=ProgramComparisonResponse, summary="Compare a rate with market value")
async def compare_exchange_rate(
    from_program: LoyaltyProgram = Query(..., alias="from"),
    to_program: LoyaltyProgram = Query(..., alias="to"),
    rate: float | None = Query(None, gt=0, description="Offered rate; defaults to the published rate"),
    session: AsyncSession = Depends(get_session),
) -> ProgramComparisonResponse:
    offered: Decimal | float | None = rate
    if offered is None:
        record = await ExchangeRateService(session).get_rate(from_program, to_program)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exchange rate not found")
        offered = Decimal(str(record.rate))

    try:
        comparison = compare_programs(from_program, to_program, offered)
    except ConversionValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    return ProgramComparisonResponse(
        fromProgram=comparison.from_program,
        toProgram=comparison.to_program,
        offeredRate=format_rate(comparison.offered_rate),
        valueRatio=format_rate(comparison.value_ratio),
        isFavorable=comparison.is_favorable,
        differencePercent=float(comparison.difference_percent),
        recommendation=comparison.recommendation,
    )


@router.post(
    "/sync",
    response_model=RateSyncResponse,
    dependencies=[Depends(require_admin_api_key)],
    summary="Republish every rate from the rate table",
)
async def sync_exchange_rates(session: AsyncSession = Depends(get_session)) -> RateSyncResponse:
    pairs = await ExchangeRateService(session).sync_published_rates()
    await session.commit()
    get_conversion_store().record_rate_sync(pairs)
    return RateSyncResponse(pairs=pairs)
