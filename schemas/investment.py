"""Pydantic schemas for systematic investments and market-traded holdings."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date, datetime
from typing import Optional
from decimal import Decimal


class InvestmentType(str, Enum):
    """How money went into a SIP."""

    sip = "sip"
    lumpsum = "lumpsum"


class Market(str, Enum):
    """Markets a traded holding can belong to."""

    indian = "indian"
    us = "us"
    crypto = "crypto"


# --- SIPs ---


class SipCreate(BaseModel):
    """Schema for starting a SIP.

    ``invested_amount`` defaults to ``sip_amount`` and ``total_units`` to
    invested / NAV.
    """

    name: str = Field(min_length=1)
    scheme_code: int | None = None
    sip_amount: Decimal = Field(gt=0)
    start_date: date
    current_nav: Decimal = Field(gt=0)
    invested_amount: Decimal | None = Field(default=None, gt=0)
    total_units: Decimal | None = Field(default=None, ge=0)
    investment_type: InvestmentType = InvestmentType.sip
    notes: str | None = None


class SipUpdate(BaseModel):
    """Schema for editing a SIP's descriptive fields."""

    name: Optional[str] = Field(default=None, min_length=1)
    scheme_code: Optional[int] = None
    sip_amount: Optional[Decimal] = Field(default=None, gt=0)
    start_date: Optional[date] = None
    notes: Optional[str] = None


class SipInstallment(BaseModel):
    """Money added to a SIP at a given NAV."""

    amount: Decimal = Field(gt=0)
    nav: Decimal = Field(gt=0)
    installment_date: date | None = None
    investment_type: InvestmentType = InvestmentType.sip
    notes: str | None = None


class NavUpdate(BaseModel):
    nav: Decimal = Field(gt=0)
    nav_date: date | None = None


class UnitsUpdate(BaseModel):
    total_units: Decimal = Field(ge=0)


class SipRedeem(BaseModel):
    """Proceeds of a full redemption."""

    redeemed_amount: Decimal = Field(ge=0)
    redeemed_date: date | None = None
    notes: str | None = None


class SipResponse(BaseModel):
    """Schema for SIP API response, including current value and returns."""

    id: str
    name: str
    scheme_code: int | None = None
    sip_amount: Decimal
    start_date: date
    total_units: Decimal
    current_nav: Decimal
    total_invested: Decimal
    current_value: Decimal
    returns_percent: Decimal
    status: str
    paused_date: date | None = None
    redeemed_date: date | None = None
    redeemed_amount: Decimal | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Traded holdings ---


class TradedHoldingCreate(BaseModel):
    """Schema for recording a bought holding.

    Give either ``buy_price`` or ``invested_value``; the buy price is then
    derived as invested / quantity.
    """

    market: Market
    symbol: str = Field(min_length=1)
    name: str | None = None
    tile_id: str | None = None
    quantity: Decimal = Field(gt=0)
    buy_price: Decimal | None = Field(default=None, gt=0)
    invested_value: Decimal | None = Field(default=None, gt=0)
    buy_date: date
    current_price: Decimal | None = Field(default=None, gt=0)
    notes: str | None = None

    @model_validator(mode="after")
    def price_or_invested_value(self):
        if self.buy_price is None and self.invested_value is None:
            raise ValueError("Either buy_price or invested_value is required")
        return self


class TradedHoldingUpdate(BaseModel):
    """Schema for editing a holding that has not been sold."""

    name: Optional[str] = None
    tile_id: Optional[str] = None
    quantity: Optional[Decimal] = Field(default=None, gt=0)
    buy_price: Optional[Decimal] = Field(default=None, gt=0)
    invested_value: Optional[Decimal] = Field(default=None, gt=0)
    buy_date: Optional[date] = None
    current_price: Optional[Decimal] = Field(default=None, gt=0)
    notes: Optional[str] = None


class PriceUpdate(BaseModel):
    current_price: Decimal = Field(gt=0)


class TradedHoldingSell(BaseModel):
    sell_price: Decimal = Field(gt=0)
    sell_date: date
    notes: str | None = None


class TradedHoldingResponse(BaseModel):
    """Schema for traded holding API response, including profit/loss."""

    id: str
    market: str
    symbol: str
    name: str | None = None
    tile_id: str | None = None
    quantity: Decimal
    buy_price: Decimal
    buy_date: date
    current_price: Decimal
    price_updated_at: datetime | None = None
    invested_value: Decimal
    current_value: Decimal
    profit_loss: Decimal
    profit_loss_percent: Decimal
    status: str
    sell_price: Decimal | None = None
    sell_date: date | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
