"""SystematicInvestment model - a mutual fund SIP valued at the latest NAV."""

from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class SystematicInvestment(Base):
    """A systematic investment plan.

    Current value and returns are derived from ``total_units``,
    ``current_nav`` and ``total_invested`` on every read.
    """

    __tablename__ = "sips"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)  # Fund name
    scheme_code = Column(Integer, nullable=True)  # Scheme identifier used for NAV lookups
    sip_amount = Column(Numeric(18, 2), nullable=False)  # Regular installment amount
    start_date = Column(Date, nullable=False)
    total_units = Column(Numeric(18, 4), nullable=False, default=Decimal("0"))
    current_nav = Column(Numeric(18, 4), nullable=False, default=Decimal("0"))
    total_invested = Column(Numeric(18, 2), nullable=False, default=Decimal("0.00"))
    status = Column(String, nullable=False, default="ongoing")  # "ongoing" | "paused" | "redeemed"
    paused_date = Column(Date, nullable=True)
    redeemed_date = Column(Date, nullable=True)
    redeemed_amount = Column(Numeric(18, 2), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    history = relationship(
        "SipTransaction", back_populates="instrument", cascade="all, delete-orphan"
    )
