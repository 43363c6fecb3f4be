"""ValuedAsset model - generic asset with a user-entered value."""

from decimal import Decimal

from sqlalchemy import Column, DateTime, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class ValuedAsset(Base):
    """An asset whose value is entered by the owner.

    ``category`` groups assets for reporting, e.g. "asset", "investment",
    "plan" or "life_xp".
    """

    __tablename__ = "valued_assets"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    value = Column(Numeric(18, 2), nullable=False, default=Decimal("0.00"))
    category = Column(String, nullable=False, index=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    history = relationship(
        "ValuedAssetHistory", back_populates="instrument", cascade="all, delete-orphan"
    )
