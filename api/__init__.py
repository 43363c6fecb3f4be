"""API route handlers."""
from . import (
    accounts,
    assets,
    fixed_deposits,
    goals,
    history,
    holdings,
    plans,
    recurring_deposits,
    sips,
    summary,
)

__all__ = [
    "accounts",
    "assets",
    "fixed_deposits",
    "goals",
    "history",
    "holdings",
    "plans",
    "recurring_deposits",
    "sips",
    "summary",
]
