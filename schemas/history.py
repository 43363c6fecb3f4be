"""Pydantic schemas for instrument history ledgers."""

import datetime

from pydantic import BaseModel, ConfigDict
from typing import Optional
from decimal import Decimal


class SnapshotCreate(BaseModel):
    """A manually recorded value for an arbitrary date.

    ``premium_amount`` applies to cover plans and ``amount`` to savings goals.
    """

    date: datetime.date
    value: Decimal
    notes: str | None = None
    premium_amount: Decimal | None = None
    amount: Decimal | None = None


class SnapshotUpdate(BaseModel):
    """Correction to an existing snapshot."""

    date: Optional[datetime.date] = None
    value: Optional[Decimal] = None
    notes: Optional[str] = None
    premium_amount: Optional[Decimal] = None
    amount: Optional[Decimal] = None


class SnapshotResponse(BaseModel):
    """One dated snapshot row."""

    id: str
    instrument_id: str
    date: datetime.date
    value: Decimal
    premium_amount: Decimal | None = None
    amount: Decimal | None = None
    notes: str | None = None
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    """One transaction row."""

    id: str
    instrument_id: str
    date: datetime.date
    kind: str
    amount: Decimal | None = None
    price: Decimal | None = None
    units: Decimal | None = None
    notes: str | None = None
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
