"""Conversion quote endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from xpoints_api.db.session import get_session
from xpoints_api.domain.programs import LoyaltyProgram
from xpoints_api.domain.tiers import MembershipTier
from xpoints_api.services.conversions import ConversionValidationError
from xpoints_api.services.exchange_rates import ExchangeRateNotFoundError
from xpoints_api.services.wallets import ConversionQuote, WalletService


router = APIRouter(prefix="/conversions", tags=["Conversions"])


class ConversionPreviewRequest(BaseModel):
    fromProgram: LoyaltyProgram
    toProgram: LoyaltyProgram
    amount: int = Field(..., gt=0, description="Source points to convert")
    userId: str | None = Field(None, description="Apply this user's membership tier fees")


class ConversionQuoteResponse(BaseModel):
    fromProgram: LoyaltyProgram
    toProgram: LoyaltyProgram
    amount: int
    fee: int
    netAmount: int
    rate: str
    convertedAmount: int
    estimatedValue: float
    tier: MembershipTier
    route: list[LoyaltyProgram]


def serialize_quote(quote: ConversionQuote) -> ConversionQuoteResponse:
    return ConversionQuoteResponse(
        fromProgram=quote.from_program,
        toProgram=quote.to_program,
        amount=quote.amount,
        fee=quote.fee,
        netAmount=quote.net_amount,
        rate=f"{quote.rate:.6f}",
        convertedAmount=quote.converted_amount,
        estimatedValue=float(quote.estimated_value),
        tier=quote.tier,
        route=list(quote.route),
    )


@router.post("/preview", response_model=ConversionQuoteResponse, summary="Quote a conversion without committing it")
async def preview_conversion(
    payload: ConversionPreviewRequest,
    session: AsyncSession = Depends(get_session),
) -> ConversionQuoteResponse:
    service = WalletService(session)
    try:
        quote = await service.preview_conversion(
            payload.fromProgram,
            payload.toProgram,
            payload.amount,
            user_id=payload.userId,
        )
    except ConversionValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except ExchangeRateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return serialize_quote(quote)
