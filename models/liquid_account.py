"""LiquidAccount model - cash or bank balance tracked by dated snapshots."""

from decimal import Decimal

from sqlalchemy import Column, DateTime, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class LiquidAccount(Base):
    """A liquid account (savings, wallet, cash) with a current balance."""

    __tablename__ = "liquid_accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    balance = Column(Numeric(18, 2), nullable=False, default=Decimal("0.00"))
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    history = relationship(
        "LiquidAccountHistory", back_populates="instrument", cascade="all, delete-orphan"
    )
