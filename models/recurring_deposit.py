"""RecurringDeposit model - periodic installments compounding to a maturity value."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class RecurringDeposit(Base):
    """A recurring deposit.

    Maturity value, installments remaining and amount invested so far are
    derived on read from the installment amount, rate and counters.
    """

    __tablename__ = "recurring_deposits"
    __table_args__ = (
        CheckConstraint("total_installments > 0", name="ck_recurring_deposit_total_positive"),
        CheckConstraint("installments_paid >= 0", name="ck_recurring_deposit_paid_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    installment_amount = Column(Numeric(18, 2), nullable=False)
    frequency = Column(String, nullable=False, default="monthly")  # "monthly" | "yearly" | "custom"
    custom_frequency_days = Column(Integer, nullable=True)
    interest_rate = Column(Numeric(9, 4), nullable=False)  # Annual %
    start_date = Column(Date, nullable=False)
    total_installments = Column(Integer, nullable=False)
    installments_paid = Column(Integer, nullable=False, default=0)
    next_due_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="ongoing")  # "ongoing" | "completed" | "closed"
    closed_date = Column(Date, nullable=True)
    actual_withdrawal = Column(Numeric(18, 2), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    history = relationship(
        "RecurringDepositTransaction", back_populates="instrument", cascade="all, delete-orphan"
    )
