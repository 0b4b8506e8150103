"""Published exchange rates derived from the canonical rate table."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Sequence, Tuple

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from xpoints_api.domain.programs import HUB_PROGRAM, POINT_VALUES, RATE_PRECISION, LoyaltyProgram, point_value
from xpoints_api.models.exchange_rate import ExchangeRate


RATE_TABLE_SOURCE = "rate-table"


class ExchangeRateNotFoundError(RuntimeError):
    """Raised when no published rate exists for a program pair."""

    def __init__(self, from_program: LoyaltyProgram, to_program: LoyaltyProgram) -> None:
        super().__init__(f"Exchange rate not found for {from_program.value} to {to_program.value}")
        self.from_program = from_program
        self.to_program = to_program


@dataclass(frozen=True, slots=True)
class ResolvedRate:
    """Effective rate for a pair plus the hops used to reach it."""

    from_program: LoyaltyProgram
    to_program: LoyaltyProgram
    rate: Decimal
    route: Tuple[LoyaltyProgram, ...]

    @property
    def is_direct(self) -> bool:
        return len(self.route) <= 2


def derive_exchange_rate(from_program: LoyaltyProgram, to_program: LoyaltyProgram) -> Decimal:
    """Units of ``to_program`` received per unit of ``from_program``."""

    if from_program == to_program:
        return Decimal("1").quantize(RATE_PRECISION)
    raw = point_value(from_program) / point_value(to_program)
    return raw.quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)


def build_verification(from_program: LoyaltyProgram, verified_at: datetime) -> Dict[str, Any]:
    return {
        "isVerified": True,
        "source": RATE_TABLE_SOURCE,
        "pointValue": str(point_value(from_program)),
        "lastVerified": verified_at.isoformat(),
        "notes": f"Derived from the published {from_program.value} point valuation",
    }


class ExchangeRateService:
    """Read and publish program-to-program exchange rates."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_rate(self, from_program: LoyaltyProgram, to_program: LoyaltyProgram) -> ExchangeRate | None:
        stmt = select(ExchangeRate).where(
            ExchangeRate.from_program == from_program,
            ExchangeRate.to_program == to_program,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_rates(self) -> Sequence[ExchangeRate]:
        stmt = select(ExchangeRate).order_by(ExchangeRate.from_program, ExchangeRate.to_program)
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def resolve_route(self, from_program: LoyaltyProgram, to_program: LoyaltyProgram) -> ResolvedRate:
        """Rate used to convert between two programs.

        Pairs touching the hub program use the published direct rate. Any
        other pair is converted through the hub, and the effective rate is the
        product of both legs rounded to the published precision.
        """

        if from_program == to_program:
            return ResolvedRate(from_program, to_program, derive_exchange_rate(from_program, to_program), (from_program,))

        if HUB_PROGRAM in (from_program, to_program):
            record = await self.get_rate(from_program, to_program)
            if record is None:
                raise ExchangeRateNotFoundError(from_program, to_program)
            return ResolvedRate(from_program, to_program, Decimal(record.rate), (from_program, to_program))

        to_hub = await self.get_rate(from_program, HUB_PROGRAM)
        if to_hub is None:
            raise ExchangeRateNotFoundError(from_program, HUB_PROGRAM)
        from_hub = await self.get_rate(HUB_PROGRAM, to_program)
        if from_hub is None:
            raise ExchangeRateNotFoundError(HUB_PROGRAM, to_program)

        effective = (Decimal(to_hub.rate) * Decimal(from_hub.rate)).quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)
        return ResolvedRate(from_program, to_program, effective, (from_program, HUB_PROGRAM, to_program))

    async def sync_published_rates(self, *, now: datetime | None = None) -> int:
        """Upsert a rate for every ordered program pair; caller commits."""

        timestamp = now or datetime.now(timezone.utc)
        existing = {
            (record.from_program, record.to_program): record for record in await self.list_rates()
        }

        written = 0
        for from_program in POINT_VALUES:
            for to_program in POINT_VALUES:
                rate = derive_exchange_rate(from_program, to_program)
                verification = build_verification(from_program, timestamp)
                record = existing.get((from_program, to_program))
                if record is None:
                    record = ExchangeRate(
                        from_program=from_program,
                        to_program=to_program,
                        rate=rate,
                        source=RATE_TABLE_SOURCE,
                        verification=verification,
                        created_at=timestamp,
                        updated_at=timestamp,
                    )
                    self._session.add(record)
                else:
                    record.rate = rate
                    record.source = RATE_TABLE_SOURCE
                    record.verification = verification
                    record.updated_at = timestamp
                written += 1

        await self._session.flush()
        logger.info("Published exchange rates synchronised", pairs=written, created=written - len(existing))
        return written


__all__ = [
    "ExchangeRateNotFoundError",
    "ExchangeRateService",
    "RATE_PRECISION",
    "RATE_TABLE_SOURCE",
    "ResolvedRate",
    "build_verification",
    "derive_exchange_rate",
]
