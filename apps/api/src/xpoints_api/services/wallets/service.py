"""Wallet balances, linked accounts, and the conversion commit path."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Sequence, Tuple

from loguru import logger
from opentelemetry import trace
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from xpoints_api.core.settings import settings
from xpoints_api.domain.programs import LoyaltyProgram
from xpoints_api.domain.tiers import MembershipTier, resolve_tier
from xpoints_api.models.transaction import ConversionStatusEnum, ConversionTransaction
from xpoints_api.models.wallet import Wallet
from xpoints_api.observability.conversions import get_conversion_store
from xpoints_api.services.conversions import (
    ConversionValidationError,
    calculate_conversion,
    conversion_fee,
)
from xpoints_api.services.exchange_rates import ExchangeRateNotFoundError, ExchangeRateService


_tracer = trace.get_tracer(__name__)


class WalletServiceError(RuntimeError):
    """Base error for wallet operations."""


class WalletNotFoundError(WalletServiceError):
    """Raised when the user has no wallet for the requested program."""

    def __init__(self, program: LoyaltyProgram, *, role: str = "Source") -> None:
        super().__init__(f"{role} wallet not found for {program.value}")
        self.program = program


class InsufficientBalanceError(WalletServiceError):
    """Raised when a conversion exceeds the source wallet balance."""

    def __init__(self, program: LoyaltyProgram, balance: int, requested: int) -> None:
        super().__init__(f"Insufficient balance: {requested} {program.value} points requested, {balance} available")
        self.program = program
        self.balance = balance
        self.requested = requested


@dataclass(frozen=True, slots=True)
class ConversionQuote:
    """Priced conversion shared by previews and committed conversions."""

    from_program: LoyaltyProgram
    to_program: LoyaltyProgram
    amount: int
    fee: int
    net_amount: int
    rate: Decimal
    converted_amount: int
    estimated_value: Decimal
    tier: MembershipTier
    route: Tuple[LoyaltyProgram, ...]


@dataclass(frozen=True, slots=True)
class LinkedAccountResult:
    wallet: Wallet
    created: bool


@dataclass(frozen=True, slots=True)
class ConversionReceipt:
    transaction: ConversionTransaction
    quote: ConversionQuote
    from_balance: int
    to_balance: int


def _month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class WalletService:
    """Manage wallets and move points between them."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._rates = ExchangeRateService(session)

    async def list_wallets(self, user_id: str) -> Sequence[Wallet]:
        stmt = select(Wallet).where(Wallet.user_id == user_id).order_by(Wallet.program)
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def get_wallet(self, user_id: str, program: LoyaltyProgram, *, for_update: bool = False) -> Wallet | None:
        stmt = select(Wallet).where(Wallet.user_id == user_id, Wallet.program == program)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def link_account(
        self,
        user_id: str,
        program: LoyaltyProgram,
        *,
        account_number: str,
        account_name: str | None = None,
    ) -> LinkedAccountResult:
        """Attach external account details, creating an empty wallet if needed."""

        wallet = await self.get_wallet(user_id, program)
        created = wallet is None
        if wallet is None:
            wallet = Wallet(
                user_id=user_id,
                program=program,
                balance=0,
                account_number=account_number,
                account_name=account_name,
            )
            self._session.add(wallet)
        else:
            wallet.account_number = account_number
            wallet.account_name = account_name

        await self._session.commit()
        await self._session.refresh(wallet)
        logger.info(
            "Loyalty account linked",
            user_id=user_id,
            program=program.value,
            created=created,
        )
        return LinkedAccountResult(wallet=wallet, created=created)

    async def list_transactions(self, user_id: str, *, limit: int | None = None) -> Sequence[ConversionTransaction]:
        stmt = (
            select(ConversionTransaction)
            .where(ConversionTransaction.user_id == user_id)
            .order_by(ConversionTransaction.created_at.desc(), ConversionTransaction.id)
            .limit(limit or settings.transaction_history_limit)
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def monthly_points_converted(self, user_id: str, *, now: datetime | None = None) -> int:
        """Source points the user converted since the start of the current month."""

        window_start = _month_start(now or datetime.now(timezone.utc))
        stmt = select(func.coalesce(func.sum(ConversionTransaction.amount_from), 0)).where(
            ConversionTransaction.user_id == user_id,
            ConversionTransaction.status == ConversionStatusEnum.COMPLETED,
            ConversionTransaction.created_at >= window_start,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one() or 0)

    async def _quote(
        self,
        from_program: LoyaltyProgram,
        to_program: LoyaltyProgram,
        amount: int,
        *,
        user_id: str | None,
    ) -> ConversionQuote:
        if from_program == to_program:
            raise ConversionValidationError("Cannot convert between the same program")
        if amount <= 0:
            raise ConversionValidationError("Amount must be greater than zero")

        tier = MembershipTier.STANDARD
        if user_id is not None:
            tier = resolve_tier(await self.monthly_points_converted(user_id))

        resolved = await self._rates.resolve_route(from_program, to_program)
        result = calculate_conversion(
            amount,
            resolved.rate,
            fee=conversion_fee(amount, tier),
            dollar_coefficient=Decimal(str(settings.preview_dollar_value)),
        )
        return ConversionQuote(
            from_program=from_program,
            to_program=to_program,
            amount=result.amount,
            fee=result.fee,
            net_amount=result.net_amount,
            rate=result.rate,
            converted_amount=result.converted_amount,
            estimated_value=result.estimated_value,
            tier=tier,
            route=resolved.route,
        )

    async def preview_conversion(
        self,
        from_program: LoyaltyProgram,
        to_program: LoyaltyProgram,
        amount: int,
        *,
        user_id: str | None = None,
    ) -> ConversionQuote:
        """Price a conversion without touching any balance."""

        store = get_conversion_store()
        try:
            quote = await self._quote(from_program, to_program, amount, user_id=user_id)
        except ConversionValidationError:
            store.record_rejection("validation")
            raise
        except ExchangeRateNotFoundError:
            store.record_rejection("rate_not_found")
            raise
        store.record_preview(from_program.value, to_program.value)
        return quote

    async def _record_failure(
        self,
        user_id: str,
        from_program: LoyaltyProgram,
        to_program: LoyaltyProgram,
        amount: int,
        reason: str,
    ) -> None:
        self._session.add(
            ConversionTransaction(
                user_id=user_id,
                from_program=from_program,
                to_program=to_program,
                amount_from=amount,
                amount_to=0,
                fee_applied=0,
                rate=Decimal("0"),
                status=ConversionStatusEnum.FAILED,
                failure_reason=reason,
                created_at=datetime.now(timezone.utc),
            )
        )
        await self._session.commit()

    async def convert_points(
        self,
        user_id: str,
        from_program: LoyaltyProgram,
        to_program: LoyaltyProgram,
        amount: int,
    ) -> ConversionReceipt:
        """Debit the source wallet, credit the destination, and record the transaction."""

        store = get_conversion_store()
        with _tracer.start_as_current_span("wallets.convert_points") as span:
            span.set_attribute("xpoints.from_program", from_program.value)
            span.set_attribute("xpoints.to_program", to_program.value)
            span.set_attribute("xpoints.amount", amount)

            if from_program == to_program:
                store.record_rejection("same_program")
                raise ConversionValidationError("Cannot convert between the same program")
            if amount <= 0:
                store.record_rejection("validation")
                raise ConversionValidationError("Amount must be greater than zero")

            source = await self.get_wallet(user_id, from_program, for_update=True)
            if source is None:
                store.record_rejection("source_wallet_missing")
                raise WalletNotFoundError(from_program, role="Source")

            if source.balance < amount:
                store.record_rejection("insufficient_balance")
                await self._record_failure(user_id, from_program, to_program, amount, "insufficient_balance")
                raise InsufficientBalanceError(from_program, source.balance, amount)

            destination = await self.get_wallet(user_id, to_program, for_update=True)
            if destination is None:
                store.record_rejection("destination_wallet_missing")
                raise WalletNotFoundError(to_program, role="Destination")

            try:
                quote = await self._quote(from_program, to_program, amount, user_id=user_id)
            except ExchangeRateNotFoundError:
                store.record_rejection("rate_not_found")
                await self._record_failure(user_id, from_program, to_program, amount, "rate_not_found")
                raise
            except ConversionValidationError:
                store.record_rejection("validation")
                raise

            source.balance = source.balance - amount
            destination.balance = destination.balance + quote.converted_amount
            transaction = ConversionTransaction(
                user_id=user_id,
                from_program=from_program,
                to_program=to_program,
                amount_from=amount,
                amount_to=quote.converted_amount,
                fee_applied=quote.fee,
                rate=quote.rate,
                status=ConversionStatusEnum.COMPLETED,
                created_at=datetime.now(timezone.utc),
            )
            self._session.add(transaction)
            await self._session.commit()
            await self._session.refresh(transaction)

            from_balance = int(source.balance)
            to_balance = int(destination.balance)
            span.set_attribute("xpoints.amount_to", quote.converted_amount)

        store.record_commit(from_program.value, to_program.value, amount, quote.converted_amount, quote.fee)
        logger.info(
            "Points converted",
            user_id=user_id,
            from_program=from_program.value,
            to_program=to_program.value,
            amount_from=amount,
            amount_to=quote.converted_amount,
            fee=quote.fee,
            tier=quote.tier.value,
        )
        return ConversionReceipt(
            transaction=transaction,
            quote=quote,
            from_balance=from_balance,
            to_balance=to_balance,
        )


__all__ = [
    "ConversionQuote",
    "ConversionReceipt",
    "InsufficientBalanceError",
    "LinkedAccountResult",
    "WalletNotFoundError",
    "WalletService",
    "WalletServiceError",
]
