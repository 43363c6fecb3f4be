"""SQLAlchemy ORM models."""

from .cover_plan import CoverPlan
from .fixed_deposit import FixedDeposit
from .history import (
    CoverPlanHistory,
    FixedDepositTransaction,
    LiquidAccountHistory,
    RecurringDepositTransaction,
    SavingsGoalHistory,
    SipTransaction,
    TradedHoldingTransaction,
    ValuedAssetHistory,
)
from .liquid_account import LiquidAccount
from .recurring_deposit import RecurringDeposit
from .savings_goal import SavingsGoal
from .sip import SystematicInvestment
from .traded_holding import TradedHolding
from .valued_asset import ValuedAsset
from .utils import generate_uuid

__all__ = [
    "CoverPlan", "CoverPlanHistory", "FixedDeposit", "FixedDepositTransaction",
    "LiquidAccount", "LiquidAccountHistory", "RecurringDeposit", "RecurringDepositTransaction",
    "SavingsGoal", "SavingsGoalHistory", "SipTransaction", "SystematicInvestment",
    "TradedHolding", "TradedHoldingTransaction", "ValuedAsset", "ValuedAssetHistory",
    "generate_uuid",
]
