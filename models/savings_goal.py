"""SavingsGoal model - a target amount saved towards over time."""

from decimal import Decimal

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class SavingsGoal(Base):
    """A savings goal (bucket) with optional recurring contribution reminders."""

    __tablename__ = "savings_goals"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    target_amount = Column(Numeric(18, 2), nullable=False, default=Decimal("0.00"))
    saved_amount = Column(Numeric(18, 2), nullable=False, default=Decimal("0.00"))
    is_repetitive = Column(Boolean, nullable=False, default=False)
    contribution_frequency = Column(String, nullable=True)  # "monthly" | "quarterly" | "yearly" | "custom"
    custom_frequency_days = Column(Integer, nullable=True)
    next_contribution_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="active")  # "active" | "achieved" | "archived"
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    history = relationship(
        "SavingsGoalHistory", back_populates="instrument", cascade="all, delete-orphan"
    )
