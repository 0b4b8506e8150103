"""Published program-to-program exchange rates."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, Enum as SqlEnum, JSON, Numeric, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from xpoints_api.db.base import Base
from xpoints_api.domain.programs import LoyaltyProgram


class ExchangeRate(Base):
    """Rate applied when converting points from one program into another."""

    __tablename__ = "exchange_rates"
    __table_args__ = (
        UniqueConstraint("from_program", "to_program", name="uq_exchange_rates_pair"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    from_program = Column(
        SqlEnum(LoyaltyProgram, name="loyalty_program_enum"),
        nullable=False,
    )
    to_program = Column(
        SqlEnum(LoyaltyProgram, name="loyalty_program_enum"),
        nullable=False,
    )
    rate = Column(Numeric(18, 6), nullable=False)
    source = Column(String, nullable=False, server_default="rate-table")
    verification = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
