"""TradedHolding model - a stock or crypto position bought at a known price."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class TradedHolding(Base):
    """A market-traded holding.

    ``tile_id`` groups holdings into isolated portfolios; NULL means the
    main portfolio of the market. Invested value, current value and P/L are
    derived on read.
    """

    __tablename__ = "traded_holdings"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_traded_holding_quantity_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String, nullable=False, index=True)
    market = Column(String, nullable=False, index=True)  # "indian" | "us" | "crypto"
    tile_id = Column(String, nullable=True, index=True)
    symbol = Column(String, nullable=False)
    name = Column(String, nullable=False)
    quantity = Column(Numeric(18, 8), nullable=False)  # Fractional shares/crypto
    buy_price = Column(Numeric(18, 4), nullable=False)
    buy_date = Column(Date, nullable=False)
    current_price = Column(Numeric(18, 4), nullable=False)
    price_updated_at = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default="holding")  # "holding" | "sold"
    sell_price = Column(Numeric(18, 4), nullable=True)
    sell_date = Column(Date, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    history = relationship(
        "TradedHoldingTransaction", back_populates="instrument", cascade="all, delete-orphan"
    )
