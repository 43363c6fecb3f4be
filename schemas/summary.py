"""Pydantic schemas for per-class summaries and the net-worth overview."""

from pydantic import BaseModel
from decimal import Decimal


class ClassSummaryResponse(BaseModel):
    """Rollup of one instrument class over its live statuses."""

    kind: str
    active_count: int
    total_invested: Decimal
    total_value: Decimal


class OverviewResponse(BaseModel):
    """Owner-wide totals; cover plans are reported but not counted as wealth."""

    net_worth: Decimal
    by_kind: dict[str, ClassSummaryResponse]
    assets_by_category: dict[str, Decimal]
    total_cover: Decimal
