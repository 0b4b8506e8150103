"""Seed development wallets with starting balances into the API database."""

from __future__ import annotations

import asyncio
import os
from typing import TypedDict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from xpoints_api.core.settings import settings
from xpoints_api.db.session import create_schema
from xpoints_api.domain.programs import LoyaltyProgram
from xpoints_api.jobs import sync_exchange_rates
from xpoints_api.models.wallet import Wallet


class SeedWallet(TypedDict):
    program: LoyaltyProgram
    balance: int
    account_number: str


DEV_USER_ID = os.getenv("DEV_WALLET_USER_ID", "dev-member")

DEV_WALLETS: list[SeedWallet] = [
    {"program": LoyaltyProgram.XPOINTS, "balance": 25_000, "account_number": "XP-000001"},
    {"program": LoyaltyProgram.QANTAS, "balance": 60_000, "account_number": "QF-1234567"},
    {"program": LoyaltyProgram.GYG, "balance": 4_500, "account_number": "GYG-778899"},
    {"program": LoyaltyProgram.VELOCITY, "balance": 18_000, "account_number": "VA-5550123"},
]


async def seed_wallets(session: AsyncSession, user_id: str = DEV_USER_ID) -> None:
    for seed in DEV_WALLETS:
        with session.no_autoflush:
            existing = await session.execute(
                select(Wallet).where(Wallet.user_id == user_id, Wallet.program == seed["program"])
            )
        record = existing.scalar_one_or_none()

        if record:
            record.balance = seed["balance"]
            record.account_number = seed["account_number"]
        else:
            session.add(
                Wallet(
                    user_id=user_id,
                    program=seed["program"],
                    balance=seed["balance"],
                    account_number=seed["account_number"],
                    account_name="Dev Member",
                )
            )
    await session.commit()


async def main() -> None:
    engine = create_async_engine(settings.database_url, future=True)
    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    try:
        await create_schema(engine)
        await sync_exchange_rates(session_factory=session_factory)
        async with session_factory() as session:
            await seed_wallets(session)
        print(f"Development wallets ready for {DEV_USER_ID} ✅")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
