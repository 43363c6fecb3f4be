"""Pydantic schemas for liquid accounts, valued assets and cover plans."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional
from decimal import Decimal


class AssetCategory(str, Enum):
    """Valid valued-asset categories."""

    asset = "asset"
    investment = "investment"
    plan = "plan"
    life_xp = "life_xp"


class PremiumFrequency(str, Enum):
    """How often a cover plan's premium falls due."""

    monthly = "monthly"
    quarterly = "quarterly"
    half_yearly = "half_yearly"
    yearly = "yearly"
    custom = "custom"


# --- Liquid accounts ---


class LiquidAccountCreate(BaseModel):
    """Schema for creating a liquid account."""

    name: str = Field(min_length=1)
    balance: Decimal = Decimal("0.00")
    notes: str | None = None


class LiquidAccountUpdate(BaseModel):
    """Schema for updating a liquid account."""

    name: Optional[str] = Field(default=None, min_length=1)
    balance: Optional[Decimal] = None
    notes: Optional[str] = None


class LiquidAccountResponse(BaseModel):
    """Schema for liquid account API response."""

    id: str
    name: str
    balance: Decimal
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Valued assets ---


class ValuedAssetCreate(BaseModel):
    """Schema for creating a valued asset."""

    name: str = Field(min_length=1)
    value: Decimal = Field(default=Decimal("0.00"), ge=0)
    category: AssetCategory = AssetCategory.asset
    notes: str | None = None


class ValuedAssetUpdate(BaseModel):
    """Schema for updating a valued asset. The category is fixed at creation."""

    name: Optional[str] = Field(default=None, min_length=1)
    value: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class ValuedAssetResponse(BaseModel):
    """Schema for valued asset API response."""

    id: str
    name: str
    value: Decimal
    category: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Cover plans ---


class CoverPlanCreate(BaseModel):
    """Schema for creating a cover (insurance) plan."""

    name: str = Field(min_length=1)
    cover_amount: Decimal = Field(ge=0)
    premium_amount: Decimal = Field(default=Decimal("0.00"), ge=0)
    premium_frequency: PremiumFrequency = PremiumFrequency.yearly
    custom_frequency_days: int | None = Field(default=None, gt=0)
    next_premium_date: date | None = None
    expiry_date: date | None = None
    notes: str | None = None


class CoverPlanUpdate(BaseModel):
    """Schema for updating a cover plan."""

    name: Optional[str] = Field(default=None, min_length=1)
    cover_amount: Optional[Decimal] = Field(default=None, ge=0)
    premium_amount: Optional[Decimal] = Field(default=None, ge=0)
    premium_frequency: Optional[PremiumFrequency] = None
    custom_frequency_days: Optional[int] = Field(default=None, gt=0)
    next_premium_date: Optional[date] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None


class CoverPlanResponse(BaseModel):
    """Schema for cover plan API response, including expiry state."""

    id: str
    name: str
    cover_amount: Decimal
    premium_amount: Decimal
    premium_frequency: str
    custom_frequency_days: int | None = None
    next_premium_date: date | None = None
    expiry_date: date | None = None
    is_expired: bool
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
