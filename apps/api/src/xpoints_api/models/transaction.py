from enum import Enum
from uuid import uuid4

from sqlalchemy import BigInteger, Column, DateTime, Enum as SqlEnum, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from xpoints_api.db.base import Base
from xpoints_api.domain.programs import LoyaltyProgram


class ConversionStatusEnum(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class ConversionTransaction(Base):
    __tablename__ = "conversion_transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    from_program = Column(
        SqlEnum(LoyaltyProgram, name="loyalty_program_enum"),
        nullable=False,
    )
    to_program = Column(
        SqlEnum(LoyaltyProgram, name="loyalty_program_enum"),
        nullable=False,
    )
    amount_from = Column(BigInteger, nullable=False)
    amount_to = Column(BigInteger, nullable=False)
    fee_applied = Column(BigInteger, nullable=False, server_default="0")
    rate = Column(Numeric(18, 6), nullable=False)
    status = Column(
        SqlEnum(ConversionStatusEnum, name="conversion_status_enum"),
        nullable=False,
        server_default=ConversionStatusEnum.COMPLETED.name,
    )
    failure_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
