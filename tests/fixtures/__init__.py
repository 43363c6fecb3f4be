"""Test fixtures and sample data."""
import pytest
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from schemas.account import CoverPlanCreate, LiquidAccountCreate, ValuedAssetCreate
from schemas.deposit import FixedDepositCreate, RecurringDepositCreate
from schemas.goal import SavingsGoalCreate
from schemas.investment import SipCreate, TradedHoldingCreate
from services.lifecycle_service import LifecycleService

OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"


def make_fixed_deposit(db: Session, owner_id: str = OWNER_ID, **overrides):
    """Open a fixed deposit of 100000 at 7% for one (365-day) year."""
    data = {
        "name": "Bank FD",
        "principal": Decimal("100000"),
        "stated_rate": Decimal("7"),
        "start_date": date(2025, 1, 1),
        "maturity_date": date(2026, 1, 1),
    }
    data.update(overrides)
    return LifecycleService.create_fixed_deposit(db, owner_id, FixedDepositCreate(**data))


def make_recurring_deposit(db: Session, owner_id: str = OWNER_ID, **overrides):
    """Open a monthly recurring deposit of 12 x 1000 at 8%."""
    data = {
        "name": "Post Office RD",
        "installment_amount": Decimal("1000"),
        "frequency": "monthly",
        "interest_rate": Decimal("8"),
        "start_date": date(2025, 1, 31),
        "total_installments": 12,
    }
    data.update(overrides)
    return LifecycleService.create_recurring_deposit(db, owner_id, RecurringDepositCreate(**data))


def make_sip(db: Session, owner_id: str = OWNER_ID, **overrides):
    """Start a SIP of 5000 at NAV 50 (100 units)."""
    data = {
        "name": "Index Fund",
        "scheme_code": 120716,
        "sip_amount": Decimal("5000"),
        "start_date": date(2025, 1, 5),
        "current_nav": Decimal("50"),
    }
    data.update(overrides)
    return LifecycleService.create_sip(db, owner_id, SipCreate(**data))


def make_holding(db: Session, owner_id: str = OWNER_ID, **overrides):
    """Buy 10 AAPL at 150 on the US market."""
    data = {
        "market": "us",
        "symbol": "aapl",
        "name": "Apple Inc.",
        "quantity": Decimal("10"),
        "buy_price": Decimal("150"),
        "buy_date": date(2025, 2, 1),
    }
    data.update(overrides)
    return LifecycleService.create_holding(db, owner_id, TradedHoldingCreate(**data))


def make_goal(db: Session, owner_id: str = OWNER_ID, **overrides):
    """Create a 10000 savings goal."""
    data = {"name": "Emergency Fund", "target_amount": Decimal("10000")}
    data.update(overrides)
    return LifecycleService.create_goal(db, owner_id, SavingsGoalCreate(**data))


@pytest.fixture
def liquid_account(db):
    """Create a liquid account with a 2500 balance."""
    return LifecycleService.create_account(
        db, OWNER_ID, LiquidAccountCreate(name="Checking", balance=Decimal("2500.00"))
    )


@pytest.fixture
def valued_asset(db):
    """Create a 500000 property asset."""
    return LifecycleService.create_asset(
        db, OWNER_ID, ValuedAssetCreate(name="Flat", value=Decimal("500000"), category="asset")
    )


@pytest.fixture
def cover_plan(db):
    """Create a term cover plan."""
    return LifecycleService.create_plan(
        db,
        OWNER_ID,
        CoverPlanCreate(
            name="Term Life",
            cover_amount=Decimal("10000000"),
            premium_amount=Decimal("12000"),
            premium_frequency="yearly",
            expiry_date=date(2050, 1, 1),
        ),
    )


@pytest.fixture
def savings_goal(db):
    return make_goal(db)


@pytest.fixture
def fixed_deposit(db):
    return make_fixed_deposit(db)


@pytest.fixture
def recurring_deposit(db):
    return make_recurring_deposit(db)


@pytest.fixture
def sip(db):
    return make_sip(db)


@pytest.fixture
def traded_holding(db):
    return make_holding(db)
