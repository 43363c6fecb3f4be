"""CoverPlan model - insurance or cover plan with a premium schedule."""

from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class CoverPlan(Base):
    """An insurance/cover plan.

    Plans have no lifecycle status; expiry is time-driven and reported as a
    derived flag.
    """

    __tablename__ = "cover_plans"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    cover_amount = Column(Numeric(18, 2), nullable=False, default=Decimal("0.00"))
    premium_amount = Column(Numeric(18, 2), nullable=False, default=Decimal("0.00"))
    premium_frequency = Column(String, nullable=False, default="yearly")
    custom_frequency_days = Column(Integer, nullable=True)  # Only for premium_frequency == "custom"
    next_premium_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    history = relationship(
        "CoverPlanHistory", back_populates="instrument", cascade="all, delete-orphan"
    )
