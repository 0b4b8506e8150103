from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import select

from xpoints_api.domain.programs import LoyaltyProgram
from xpoints_api.domain.tiers import MembershipTier
from xpoints_api.models.transaction import ConversionStatusEnum, ConversionTransaction
from xpoints_api.models.wallet import Wallet
from xpoints_api.services.conversions import ConversionValidationError
from xpoints_api.services.exchange_rates import ExchangeRateNotFoundError
from xpoints_api.services.wallets import (
    InsufficientBalanceError,
    WalletNotFoundError,
    WalletService,
)


USER_ID = "member-1"


async def _fund(session_factory, user_id: str, balances: dict[LoyaltyProgram, int]) -> None:
    async with session_factory() as session:
        for program, balance in balances.items():
            session.add(Wallet(user_id=user_id, program=program, balance=balance))
        await session.commit()


@pytest.mark.asyncio
async def test_link_account_creates_then_updates(session_factory) -> None:
    async with session_factory() as session:
        service = WalletService(session)
        first = await service.link_account(USER_ID, LoyaltyProgram.QANTAS, account_number="QF-1", account_name="Sam")
        second = await service.link_account(USER_ID, LoyaltyProgram.QANTAS, account_number="QF-2", account_name="Sam R")

        assert first.created is True
        assert first.wallet.balance == 0
        assert second.created is False
        assert second.wallet.id == first.wallet.id
        assert second.wallet.account_number == "QF-2"

        wallets = await service.list_wallets(USER_ID)
        assert [wallet.program for wallet in wallets] == [LoyaltyProgram.QANTAS]


@pytest.mark.asyncio
async def test_convert_points_direct(seeded_session_factory) -> None:
    await _fund(seeded_session_factory, USER_ID, {LoyaltyProgram.QANTAS: 5_000, LoyaltyProgram.XPOINTS: 0})

    async with seeded_session_factory() as session:
        receipt = await WalletService(session).convert_points(USER_ID, LoyaltyProgram.QANTAS, LoyaltyProgram.XPOINTS, 1_000)

    assert receipt.from_balance == 4_000
    assert receipt.to_balance == 600
    assert receipt.transaction.amount_to == 600
    assert receipt.transaction.status is ConversionStatusEnum.COMPLETED
    assert receipt.quote.estimated_value == Decimal("9.00")

    async with seeded_session_factory() as session:
        wallet = await WalletService(session).get_wallet(USER_ID, LoyaltyProgram.XPOINTS)
        assert wallet is not None and wallet.balance == 600


@pytest.mark.asyncio
async def test_convert_points_through_hub(seeded_session_factory) -> None:
    await _fund(seeded_session_factory, USER_ID, {LoyaltyProgram.QANTAS: 5_000, LoyaltyProgram.GYG: 100})

    async with seeded_session_factory() as session:
        service = WalletService(session)
        preview = await service.preview_conversion(LoyaltyProgram.QANTAS, LoyaltyProgram.GYG, 1_000, user_id=USER_ID)
        receipt = await service.convert_points(USER_ID, LoyaltyProgram.QANTAS, LoyaltyProgram.GYG, 1_000)

    assert preview.converted_amount == 750
    assert preview.route == (LoyaltyProgram.QANTAS, LoyaltyProgram.XPOINTS, LoyaltyProgram.GYG)
    assert receipt.quote == preview
    assert receipt.to_balance == 850


@pytest.mark.asyncio
async def test_convert_points_applies_tier_fee(seeded_session_factory) -> None:
    await _fund(seeded_session_factory, USER_ID, {LoyaltyProgram.QANTAS: 60_000, LoyaltyProgram.XPOINTS: 0})

    async with seeded_session_factory() as session:
        service = WalletService(session)
        receipt = await service.convert_points(USER_ID, LoyaltyProgram.QANTAS, LoyaltyProgram.XPOINTS, 20_000)

        assert receipt.quote.tier is MembershipTier.STANDARD
        assert receipt.quote.fee == 50
        assert receipt.to_balance == 11_970
        assert receipt.transaction.fee_applied == 50

        assert await service.monthly_points_converted(USER_ID) == 20_000
        follow_up = await service.preview_conversion(
            LoyaltyProgram.QANTAS, LoyaltyProgram.XPOINTS, 30_000, user_id=USER_ID
        )

    assert follow_up.tier is MembershipTier.SILVER
    assert follow_up.fee == 45


@pytest.mark.asyncio
async def test_convert_points_rejects_same_program(seeded_session_factory) -> None:
    async with seeded_session_factory() as session:
        with pytest.raises(ConversionValidationError):
            await WalletService(session).convert_points(USER_ID, LoyaltyProgram.GYG, LoyaltyProgram.GYG, 10)


@pytest.mark.asyncio
async def test_convert_points_missing_wallets(seeded_session_factory) -> None:
    async with seeded_session_factory() as session:
        service = WalletService(session)
        with pytest.raises(WalletNotFoundError, match="Source wallet"):
            await service.convert_points(USER_ID, LoyaltyProgram.QANTAS, LoyaltyProgram.XPOINTS, 10)

    await _fund(seeded_session_factory, USER_ID, {LoyaltyProgram.QANTAS: 100})
    async with seeded_session_factory() as session:
        with pytest.raises(WalletNotFoundError, match="Destination wallet"):
            await WalletService(session).convert_points(USER_ID, LoyaltyProgram.QANTAS, LoyaltyProgram.XPOINTS, 10)


@pytest.mark.asyncio
async def test_convert_points_insufficient_balance_records_failure(seeded_session_factory, reset_conversion_store) -> None:
    await _fund(seeded_session_factory, USER_ID, {LoyaltyProgram.QANTAS: 500, LoyaltyProgram.XPOINTS: 0})

    async with seeded_session_factory() as session:
        with pytest.raises(InsufficientBalanceError):
            await WalletService(session).convert_points(USER_ID, LoyaltyProgram.QANTAS, LoyaltyProgram.XPOINTS, 501)

    async with seeded_session_factory() as session:
        service = WalletService(session)
        source = await service.get_wallet(USER_ID, LoyaltyProgram.QANTAS)
        history = await service.list_transactions(USER_ID)
        assert await service.monthly_points_converted(USER_ID) == 0

    assert source is not None and source.balance == 500
    assert [record.status for record in history] == [ConversionStatusEnum.FAILED]
    assert history[0].failure_reason == "insufficient_balance"
    assert reset_conversion_store.snapshot().rejections == {"insufficient_balance": 1}


@pytest.mark.asyncio
async def test_convert_points_without_published_rates(session_factory) -> None:
    await _fund(session_factory, USER_ID, {LoyaltyProgram.QANTAS: 500, LoyaltyProgram.XPOINTS: 0})

    async with session_factory() as session:
        with pytest.raises(ExchangeRateNotFoundError):
            await WalletService(session).convert_points(USER_ID, LoyaltyProgram.QANTAS, LoyaltyProgram.XPOINTS, 100)

    async with session_factory() as session:
        rows = (await session.execute(select(ConversionTransaction))).scalars().all()
        wallet = await WalletService(session).get_wallet(USER_ID, LoyaltyProgram.QANTAS)

    assert [row.failure_reason for row in rows] == ["rate_not_found"]
    assert wallet is not None and wallet.balance == 500


@pytest.mark.asyncio
async def test_convert_points_rejects_amount_that_credits_nothing(seeded_session_factory, reset_conversion_store) -> None:
    await _fund(seeded_session_factory, USER_ID, {LoyaltyProgram.HILTON: 10, LoyaltyProgram.XPOINTS: 0})

    async with seeded_session_factory() as session:
        service = WalletService(session)
        with pytest.raises(ConversionValidationError, match="too small"):
            await service.preview_conversion(LoyaltyProgram.HILTON, LoyaltyProgram.XPOINTS, 1, user_id=USER_ID)
        with pytest.raises(ConversionValidationError, match="too small"):
            await service.convert_points(USER_ID, LoyaltyProgram.HILTON, LoyaltyProgram.XPOINTS, 1)

    async with seeded_session_factory() as session:
        service = WalletService(session)
        source = await service.get_wallet(USER_ID, LoyaltyProgram.HILTON)
        destination = await service.get_wallet(USER_ID, LoyaltyProgram.XPOINTS)
        history = await service.list_transactions(USER_ID)

    assert source is not None and source.balance == 10
    assert destination is not None and destination.balance == 0
    assert list(history) == []
    assert reset_conversion_store.snapshot().rejections == {"validation": 2}
    assert reset_conversion_store.snapshot().totals.get("commits", 0) == 0


@pytest.mark.asyncio
async def test_list_transactions_newest_first(seeded_session_factory) -> None:
    await _fund(seeded_session_factory, USER_ID, {LoyaltyProgram.QANTAS: 5_000, LoyaltyProgram.XPOINTS: 0})

    async with seeded_session_factory() as session:
        service = WalletService(session)
        await service.convert_points(USER_ID, LoyaltyProgram.QANTAS, LoyaltyProgram.XPOINTS, 100)
        await service.convert_points(USER_ID, LoyaltyProgram.QANTAS, LoyaltyProgram.XPOINTS, 200)
        history = await service.list_transactions(USER_ID)
        limited = await service.list_transactions(USER_ID, limit=1)

    assert [record.amount_from for record in history] == [200, 100]
    assert [record.amount_from for record in limited] == [200]


@pytest.mark.asyncio
async def test_preview_without_user_uses_standard_tier(seeded_session_factory) -> None:
    async with seeded_session_factory() as session:
        quote = await WalletService(session).preview_conversion(LoyaltyProgram.XPOINTS, LoyaltyProgram.QANTAS, 1_000)

    assert quote.tier is MembershipTier.STANDARD
    assert quote.rate == Decimal("1.666667")
    assert quote.converted_amount == 1_666
