"""Pydantic schemas for fixed-term and recurring deposits."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date, datetime
from typing import Optional
from decimal import Decimal


class InstallmentFrequency(str, Enum):
    """Recurring deposit installment frequencies."""

    monthly = "monthly"
    yearly = "yearly"
    custom = "custom"


# --- Fixed deposits ---


class FixedDepositCreate(BaseModel):
    """Schema for opening a fixed-term deposit."""

    name: str = Field(min_length=1)
    principal: Decimal = Field(gt=0)
    stated_rate: Decimal = Field(ge=0)
    start_date: date
    maturity_date: date
    notes: str | None = None

    @model_validator(mode="after")
    def maturity_not_before_start(self):
        if self.maturity_date < self.start_date:
            raise ValueError("maturity_date must not be before start_date")
        return self


class FixedDepositUpdate(BaseModel):
    """Schema for editing an ongoing fixed deposit."""

    name: Optional[str] = Field(default=None, min_length=1)
    principal: Optional[Decimal] = Field(default=None, gt=0)
    stated_rate: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    maturity_date: Optional[date] = None
    notes: Optional[str] = None


class FixedDepositClose(BaseModel):
    """Payout actually received when a fixed deposit closed."""

    actual_payout: Decimal = Field(ge=0)
    closed_date: date
    notes: str | None = None


class FixedDepositResponse(BaseModel):
    """Schema for fixed deposit API response, including expected payout."""

    id: str
    name: str
    principal: Decimal
    stated_rate: Decimal
    realized_rate: Decimal | None = None
    effective_rate: Decimal
    start_date: date
    maturity_date: date
    expected_payout: Decimal
    actual_payout: Decimal | None = None
    status: str
    closed_date: date | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Recurring deposits ---


class RecurringDepositCreate(BaseModel):
    """Schema for opening a recurring deposit."""

    name: str = Field(min_length=1)
    installment_amount: Decimal = Field(gt=0)
    frequency: InstallmentFrequency = InstallmentFrequency.monthly
    custom_frequency_days: int | None = Field(default=None, gt=0)
    interest_rate: Decimal = Field(ge=0)
    start_date: date
    total_installments: int = Field(gt=0)
    notes: str | None = None


class RecurringDepositUpdate(BaseModel):
    """Schema for editing an ongoing recurring deposit."""

    name: Optional[str] = Field(default=None, min_length=1)
    installment_amount: Optional[Decimal] = Field(default=None, gt=0)
    frequency: Optional[InstallmentFrequency] = None
    custom_frequency_days: Optional[int] = Field(default=None, gt=0)
    interest_rate: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    total_installments: Optional[int] = Field(default=None, gt=0)
    notes: Optional[str] = None


class InstallmentPayment(BaseModel):
    """Marks the next installment paid; the date defaults to today."""

    paid_date: date | None = None
    notes: str | None = None


class RecurringDepositClose(BaseModel):
    """Amount withdrawn when a recurring deposit closed."""

    actual_withdrawal: Decimal = Field(ge=0)
    closed_date: date
    notes: str | None = None


class RecurringDepositResponse(BaseModel):
    """Schema for recurring deposit API response, including maturity value."""

    id: str
    name: str
    installment_amount: Decimal
    frequency: str
    custom_frequency_days: int | None = None
    interest_rate: Decimal
    start_date: date
    total_installments: int
    installments_paid: int
    installments_remaining: int
    total_invested: Decimal
    maturity_value: Decimal
    next_due_date: date | None = None
    status: str
    closed_date: date | None = None
    actual_withdrawal: Decimal | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
