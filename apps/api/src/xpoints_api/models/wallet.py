"""Linked loyalty-program wallets."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, Enum as SqlEnum, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from xpoints_api.db.base import Base
from xpoints_api.domain.programs import LoyaltyProgram


class Wallet(Base):
    """Point balance a user holds in one external loyalty program."""

    __tablename__ = "wallets"
    __table_args__ = (
        UniqueConstraint("user_id", "program", name="uq_wallets_user_program"),
        CheckConstraint("balance >= 0", name="ck_wallets_balance_non_negative"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    program = Column(SqlEnum(LoyaltyProgram, name="loyalty_program_enum"), nullable=False)
    balance = Column(BigInteger, nullable=False, default=0, server_default="0")
    account_number = Column(String, nullable=True)
    account_name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
