"""FixedDeposit model - principal locked at a simple-interest rate until maturity."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class FixedDeposit(Base):
    """A fixed-term deposit.

    ``stated_rate`` is the rate quoted at opening and is never rewritten.
    ``realized_rate`` is back-solved from the actual payout when the
    deposit closes. Expected payout is derived on read.
    """

    __tablename__ = "fixed_deposits"
    __table_args__ = (
        CheckConstraint("principal > 0", name="ck_fixed_deposit_principal_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    principal = Column(Numeric(18, 2), nullable=False)
    stated_rate = Column(Numeric(9, 4), nullable=False)  # Annual %
    realized_rate = Column(Numeric(9, 4), nullable=True)
    start_date = Column(Date, nullable=False)
    maturity_date = Column(Date, nullable=False)
    actual_payout = Column(Numeric(18, 2), nullable=True)  # Filled when closed
    status = Column(String, nullable=False, default="ongoing")  # "ongoing" | "closed"
    closed_date = Column(Date, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    history = relationship(
        "FixedDepositTransaction", back_populates="instrument", cascade="all, delete-orphan"
    )
