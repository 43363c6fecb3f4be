"""Pydantic schemas for savings goals."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional
from decimal import Decimal


class ContributionFrequency(str, Enum):
    """How often a repetitive goal expects a contribution."""

    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"
    custom = "custom"


class SavingsGoalCreate(BaseModel):
    """Schema for creating a savings goal. Goals always start with nothing saved."""

    name: str = Field(min_length=1)
    target_amount: Decimal = Field(ge=0)
    is_repetitive: bool = False
    contribution_frequency: ContributionFrequency | None = None
    custom_frequency_days: int | None = Field(default=None, gt=0)
    next_contribution_date: date | None = None
    notes: str | None = None


class SavingsGoalUpdate(BaseModel):
    """Schema for updating a savings goal."""

    name: Optional[str] = Field(default=None, min_length=1)
    target_amount: Optional[Decimal] = Field(default=None, ge=0)
    is_repetitive: Optional[bool] = None
    contribution_frequency: Optional[ContributionFrequency] = None
    custom_frequency_days: Optional[int] = Field(default=None, gt=0)
    next_contribution_date: Optional[date] = None
    notes: Optional[str] = None


class ContributionRequest(BaseModel):
    """A contribution (positive) or withdrawal (negative)."""

    amount: Decimal
    notes: str | None = None
    contribution_date: date | None = None


class SavingsGoalResponse(BaseModel):
    """Schema for savings goal API response, including progress."""

    id: str
    name: str
    target_amount: Decimal
    saved_amount: Decimal
    is_repetitive: bool
    contribution_frequency: str | None = None
    custom_frequency_days: int | None = None
    next_contribution_date: date | None = None
    status: str
    progress_percent: Decimal
    remaining_amount: Decimal
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
