"""Per-user wallets, conversions, and history."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from xpoints_api.core.settings import settings
from xpoints_api.db.session import get_session
from xpoints_api.domain.programs import LoyaltyProgram
from xpoints_api.domain.tiers import TIER_BENEFITS, MembershipTier, resolve_tier
from xpoints_api.models.transaction import ConversionTransaction
from xpoints_api.models.wallet import Wallet
from xpoints_api.services.conversions import ConversionValidationError
from xpoints_api.services.exchange_rates import ExchangeRateNotFoundError
from xpoints_api.services.rewards import get_points_dollar_value
from xpoints_api.services.wallets import InsufficientBalanceError, WalletNotFoundError, WalletService

from .conversions import ConversionQuoteResponse, serialize_quote


router = APIRouter(prefix="/users/{user_id}", tags=["Wallets"])


class WalletResponse(BaseModel):
    id: UUID
    userId: str
    program: LoyaltyProgram
    balance: int
    dollarValue: float
    accountNumber: str | None
    accountName: str | None
    createdAt: datetime | None
    updatedAt: datetime | None


class LinkAccountRequest(BaseModel):
    program: LoyaltyProgram
    accountNumber: str = Field(..., min_length=1)
    accountName: str | None = Field(None, description="Name on the external account")


class LinkAccountResponse(BaseModel):
    wallet: WalletResponse
    created: bool


class ConvertPointsRequest(BaseModel):
    fromProgram: LoyaltyProgram
    toProgram: LoyaltyProgram
    amount: int = Field(..., gt=0)


class TransactionResponse(BaseModel):
    id: UUID
    userId: str
    fromProgram: LoyaltyProgram
    toProgram: LoyaltyProgram
    amountFrom: int
    amountTo: int
    feeApplied: int
    rate: str
    status: str
    failureReason: str | None
    createdAt: datetime | None


class ConvertPointsResponse(BaseModel):
    transaction: TransactionResponse
    fromBalance: int
    toBalance: int
    quote: ConversionQuoteResponse


class MembershipTierResponse(BaseModel):
    tier: MembershipTier
    monthlyPointsConverted: int
    freeConversionLimit: int
    conversionFeeRate: float
    nextTier: MembershipTier | None
    pointsToNextTier: int | None


def _serialize_wallet(wallet: Wallet) -> WalletResponse:
    return WalletResponse(
        id=wallet.id,
        userId=wallet.user_id,
        program=wallet.program,
        balance=int(wallet.balance),
        dollarValue=float(get_points_dollar_value(int(wallet.balance), wallet.program)),
        accountNumber=wallet.account_number,
        accountName=wallet.account_name,
        createdAt=wallet.created_at,
        updatedAt=wallet.updated_at,
    )


def _serialize_transaction(record: ConversionTransaction) -> TransactionResponse:
    return TransactionResponse(
        id=record.id,
        userId=record.user_id,
        fromProgram=record.from_program,
        toProgram=record.to_program,
        amountFrom=int(record.amount_from),
        amountTo=int(record.amount_to),
        feeApplied=int(record.fee_applied or 0),
        rate=f"{Decimal(str(record.rate)):.6f}",
        status=record.status.value,
        failureReason=record.failure_reason,
        createdAt=record.created_at,
    )


@router.get("/wallets", response_model=list[WalletResponse], summary="List linked wallets")
async def list_wallets(
    user_id: str = Path(..., min_length=1, max_length=64),
    session: AsyncSession = Depends(get_session),
) -> list[WalletResponse]:
    wallets = await WalletService(session).list_wallets(user_id)
    return [_serialize_wallet(wallet) for wallet in wallets]


@router.post("/wallets", response_model=LinkAccountResponse, summary="Link an external loyalty account")
async def link_account(
    payload: LinkAccountRequest,
    response: Response,
    user_id: str = Path(..., min_length=1, max_length=64),
    session: AsyncSession = Depends(get_session),
) -> LinkAccountResponse:
    result = await WalletService(session).link_account(
        user_id,
        payload.program,
        account_number=payload.accountNumber,
        account_name=payload.accountName,
    )
    response.status_code = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
    return LinkAccountResponse(wallet=_serialize_wallet(result.wallet), created=result.created)


@router.post("/conversions", response_model=ConvertPointsResponse, summary="Convert points between wallets")
async def convert_points(
    payload: ConvertPointsRequest,
    user_id: str = Path(..., min_length=1, max_length=64),
    session: AsyncSession = Depends(get_session),
) -> ConvertPointsResponse:
    service = WalletService(session)
    try:
        receipt = await service.convert_points(user_id, payload.fromProgram, payload.toProgram, payload.amount)
    except ConversionValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except WalletNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InsufficientBalanceError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Insufficient balance") from exc
    except ExchangeRateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exchange rate not found") from exc

    return ConvertPointsResponse(
        transaction=_serialize_transaction(receipt.transaction),
        fromBalance=receipt.from_balance,
        toBalance=receipt.to_balance,
        quote=serialize_quote(receipt.quote),
    )


@router.get("/transactions", response_model=list[TransactionResponse], summary="Conversion history, newest first")
async def list_transactions(
    user_id: str = Path(..., min_length=1, max_length=64),
    limit: int = Query(settings.transaction_history_limit, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
) -> list[TransactionResponse]:
    records = await WalletService(session).list_transactions(user_id, limit=limit)
    return [_serialize_transaction(record) for record in records]


@router.get("/tier", response_model=MembershipTierResponse, summary="Membership tier for this month")
async def membership_tier(
    user_id: str = Path(..., min_length=1, max_length=64),
    session: AsyncSession = Depends(get_session),
) -> MembershipTierResponse:
    converted = await WalletService(session).monthly_points_converted(user_id)
    tier = resolve_tier(converted)
    benefit = TIER_BENEFITS[tier]

    upcoming = [
        candidate
        for candidate in TIER_BENEFITS.values()
        if candidate.monthly_points_threshold > benefit.monthly_points_threshold
    ]
    next_benefit = min(upcoming, key=lambda candidate: candidate.monthly_points_threshold) if upcoming else None
    return MembershipTierResponse(
        tier=tier,
        monthlyPointsConverted=converted,
        freeConversionLimit=benefit.free_conversion_limit,
        conversionFeeRate=float(benefit.conversion_fee_rate),
        nextTier=next_benefit.tier if next_benefit else None,
        pointsToNextTier=(next_benefit.monthly_points_threshold - converted) if next_benefit else None,
    )
