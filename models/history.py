"""Ledger models - dated history rows owned by a single instrument.

Two disciplines share these tables:

- Snapshot ledgers hold one row per (instrument, date); writing the same
  date again overwrites the value ("value as of date").
- Transaction ledgers are append-only; each row is a discrete event and
  several rows may share a date.
"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class SnapshotColumns:
    """Columns shared by every upsert-by-date ledger."""

    id = Column(String(36), primary_key=True, default=generate_uuid)
    date = Column(Date, nullable=False)
    value = Column(Numeric(18, 2), nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)


class TransactionColumns:
    """Columns shared by every append-only ledger."""

    id = Column(String(36), primary_key=True, default=generate_uuid)
    date = Column(Date, nullable=False)
    kind = Column(String, nullable=False)
    amount = Column(Numeric(18, 2), nullable=True)
    price = Column(Numeric(18, 4), nullable=True)
    units = Column(Numeric(18, 8), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)


# --- Snapshot ledgers ---


class LiquidAccountHistory(SnapshotColumns, Base):
    """Balance of a liquid account as of a date."""

    __tablename__ = "liquid_account_history"
    __table_args__ = (
        UniqueConstraint("instrument_id", "date", name="uix_liquid_account_history_date"),
    )

    instrument_id = Column(
        String(36), ForeignKey("liquid_accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    instrument = relationship("LiquidAccount", back_populates="history")


class ValuedAssetHistory(SnapshotColumns, Base):
    """Value of an asset as of a date."""

    __tablename__ = "valued_asset_history"
    __table_args__ = (
        UniqueConstraint("instrument_id", "date", name="uix_valued_asset_history_date"),
    )

    instrument_id = Column(
        String(36), ForeignKey("valued_assets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    instrument = relationship("ValuedAsset", back_populates="history")


class CoverPlanHistory(SnapshotColumns, Base):
    """Cover amount (``value``) and premium of a plan as of a date."""

    __tablename__ = "cover_plan_history"
    __table_args__ = (
        UniqueConstraint("instrument_id", "date", name="uix_cover_plan_history_date"),
    )

    instrument_id = Column(
        String(36), ForeignKey("cover_plans.id", ondelete="CASCADE"), nullable=False, index=True
    )
    premium_amount = Column(Numeric(18, 2), nullable=False)

    instrument = relationship("CoverPlan", back_populates="history")


class SavingsGoalHistory(SnapshotColumns, Base):
    """Running total saved (``value``) for a goal as of a date.

    ``amount`` is the net contribution made on that date.
    """

    __tablename__ = "savings_goal_history"
    __table_args__ = (
        UniqueConstraint("instrument_id", "date", name="uix_savings_goal_history_date"),
    )

    instrument_id = Column(
        String(36), ForeignKey("savings_goals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Numeric(18, 2), nullable=False)

    instrument = relationship("SavingsGoal", back_populates="history")


# --- Transaction ledgers ---


class FixedDepositTransaction(TransactionColumns, Base):
    """Opening, closure and closure-correction events of a fixed deposit."""

    __tablename__ = "fixed_deposit_transactions"

    instrument_id = Column(
        String(36), ForeignKey("fixed_deposits.id", ondelete="CASCADE"), nullable=False, index=True
    )

    instrument = relationship("FixedDeposit", back_populates="history")


class RecurringDepositTransaction(TransactionColumns, Base):
    """Installment and closure events of a recurring deposit."""

    __tablename__ = "recurring_deposit_transactions"

    instrument_id = Column(
        String(36), ForeignKey("recurring_deposits.id", ondelete="CASCADE"), nullable=False, index=True
    )

    instrument = relationship("RecurringDeposit", back_populates="history")


class SipTransaction(TransactionColumns, Base):
    """Installments, lumpsums, NAV updates and redemptions of a SIP."""

    __tablename__ = "sip_transactions"

    instrument_id = Column(
        String(36), ForeignKey("sips.id", ondelete="CASCADE"), nullable=False, index=True
    )

    instrument = relationship("SystematicInvestment", back_populates="history")


class TradedHoldingTransaction(TransactionColumns, Base):
    """Buy, price-update and sell events of a traded holding."""

    __tablename__ = "traded_holding_transactions"

    instrument_id = Column(
        String(36), ForeignKey("traded_holdings.id", ondelete="CASCADE"), nullable=False, index=True
    )

    instrument = relationship("TradedHolding", back_populates="history")
