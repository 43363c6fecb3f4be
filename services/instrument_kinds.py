"""Per-class strategies for the eight instrument kinds.

Each ``InstrumentKind`` bundles what differs between classes: the ORM model
and its ledger model, the ledger discipline, the lifecycle statuses and
transition table, how rows are ordered and filtered, and the functions that
derive display values from stored base fields. Store, ledger, lifecycle and
summary services are written once against this interface.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable

from sqlalchemy import asc

from models import (
    CoverPlan,
    CoverPlanHistory,
    FixedDeposit,
    FixedDepositTransaction,
    LiquidAccount,
    LiquidAccountHistory,
    RecurringDeposit,
    RecurringDepositTransaction,
    SavingsGoal,
    SavingsGoalHistory,
    SipTransaction,
    SystematicInvestment,
    TradedHolding,
    TradedHoldingTransaction,
    ValuedAsset,
    ValuedAssetHistory,
)
from services import valuation_engine as ve
from services.exceptions import InvalidTransitionError, ValidationError

SNAPSHOT = "snapshot"
TRANSACTION = "transaction"


@dataclass(frozen=True)
class InstrumentKind:
    """Strategy describing one instrument class.

    ``transitions`` maps an action name to ``(allowed_from, target_status)``;
    a ``None`` target leaves the status unchanged (or lets the lifecycle
    service decide, e.g. completing a recurring deposit).
    """

    name: str
    label: str
    model: type
    ledger_model: type
    discipline: str
    statuses: tuple[str, ...] = ()
    initial_status: str | None = None
    live_statuses: tuple[str, ...] = ()
    terminal_statuses: tuple[str, ...] = ()
    transitions: dict[str, tuple[tuple[str, ...], str | None]] = field(default_factory=dict)
    filter_fields: tuple[str, ...] = ()
    order_by: Callable[[type], list] = lambda model: [asc(model.name)]
    derive: Callable[[Any], dict] = lambda instrument: {}
    invested: Callable[[Any], Any] = lambda instrument: ve.ZERO
    value: Callable[[Any], Any] = lambda instrument: ve.ZERO

    @property
    def has_lifecycle(self) -> bool:
        return bool(self.statuses)

    @property
    def is_snapshot_ledger(self) -> bool:
        return self.discipline == SNAPSHOT

    def is_live(self, instrument) -> bool:
        """True when the instrument counts towards summaries."""
        if not self.has_lifecycle:
            return True
        return instrument.status in self.live_statuses

    def check_transition(self, instrument, action: str) -> str | None:
        """Validate ``action`` against the instrument's status.

        Returns the target status (``None`` when unchanged).

        Raises:
            InvalidTransitionError: action not legal from the current status
        """
        if not self.has_lifecycle:
            return None
        if action not in self.transitions:
            raise InvalidTransitionError(
                f"{self.label} does not support '{action}'",
                kind=self.name,
                status=instrument.status,
                action=action,
            )
        allowed_from, target = self.transitions[action]
        if instrument.status not in allowed_from:
            raise InvalidTransitionError(
                f"Cannot {action.replace('_', ' ')} a {self.label.lower()} "
                f"with status '{instrument.status}'",
                kind=self.name,
                status=instrument.status,
                action=action,
            )
        return target

    def derived_fields(self, instrument) -> dict:
        """Derived values recomputed from the instrument's stored fields."""
        return self.derive(instrument)


# --- Derived-field functions ---


def _derive_cover_plan(plan: CoverPlan) -> dict:
    return {
        "is_expired": plan.expiry_date is not None and plan.expiry_date < date.today(),
    }


def _derive_savings_goal(goal: SavingsGoal) -> dict:
    progress, remaining = ve.goal_progress(goal.saved_amount, goal.target_amount)
    return {"progress_percent": progress, "remaining_amount": remaining}


def _derive_fixed_deposit(fd: FixedDeposit) -> dict:
    closed = fd.status == "closed" and fd.realized_rate is not None
    return {
        "expected_payout": ve.simple_interest_payout(
            fd.principal, fd.stated_rate, fd.start_date, fd.maturity_date
        ),
        "effective_rate": fd.realized_rate if closed else fd.stated_rate,
    }


def _derive_recurring_deposit(rd: RecurringDeposit) -> dict:
    return {
        "maturity_value": ve.recurring_deposit_maturity(
            rd.installment_amount,
            rd.interest_rate,
            rd.frequency,
            rd.total_installments,
            rd.custom_frequency_days,
        ),
        "installments_remaining": max(rd.total_installments - rd.installments_paid, 0),
        "total_invested": ve.money(rd.installment_amount * rd.installments_paid),
    }


def _derive_sip(sip: SystematicInvestment) -> dict:
    current_value, returns = ve.sip_valuation(sip.total_units, sip.current_nav, sip.total_invested)
    return {"current_value": current_value, "returns_percent": returns}


def _derive_traded_holding(holding: TradedHolding) -> dict:
    invested, current, pl, pl_percent = ve.holding_valuation(
        holding.quantity, holding.buy_price, holding.current_price
    )
    return {
        "invested_value": invested,
        "current_value": current,
        "profit_loss": pl,
        "profit_loss_percent": pl_percent,
    }


# --- Registry ---


LIQUID_ACCOUNT = InstrumentKind(
    name="liquid_account",
    label="Account",
    model=LiquidAccount,
    ledger_model=LiquidAccountHistory,
    discipline=SNAPSHOT,
    invested=lambda a: a.balance,
    value=lambda a: a.balance,
)

VALUED_ASSET = InstrumentKind(
    name="valued_asset",
    label="Asset",
    model=ValuedAsset,
    ledger_model=ValuedAssetHistory,
    discipline=SNAPSHOT,
    filter_fields=("category",),
    invested=lambda a: a.value,
    value=lambda a: a.value,
)

COVER_PLAN = InstrumentKind(
    name="cover_plan",
    label="Plan",
    model=CoverPlan,
    ledger_model=CoverPlanHistory,
    discipline=SNAPSHOT,
    derive=_derive_cover_plan,
    invested=lambda p: p.premium_amount,
    value=lambda p: p.cover_amount,
)

SAVINGS_GOAL = InstrumentKind(
    name="savings_goal",
    label="Goal",
    model=SavingsGoal,
    ledger_model=SavingsGoalHistory,
    discipline=SNAPSHOT,
    statuses=("active", "achieved", "archived"),
    initial_status="active",
    live_statuses=("active",),
    transitions={
        "update": (("active", "achieved"), None),
        "contribute": (("active", "achieved"), None),
        "mark_contribution_done": (("active", "achieved"), None),
        "mark_achieved": (("active",), "achieved"),
        "reactivate": (("achieved", "archived"), "active"),
        "archive": (("active", "achieved"), "archived"),
    },
    order_by=lambda m: [asc(m.status), asc(m.name)],
    derive=_derive_savings_goal,
    invested=lambda g: g.saved_amount,
    value=lambda g: g.saved_amount,
)

FIXED_DEPOSIT = InstrumentKind(
    name="fixed_deposit",
    label="Fixed deposit",
    model=FixedDeposit,
    ledger_model=FixedDepositTransaction,
    discipline=TRANSACTION,
    statuses=("ongoing", "closed"),
    initial_status="ongoing",
    live_statuses=("ongoing",),
    terminal_statuses=("closed",),
    transitions={
        "update": (("ongoing",), None),
        "close": (("ongoing",), "closed"),
        "update_closed_record": (("closed",), None),
    },
    order_by=lambda m: [asc(m.status), asc(m.maturity_date)],
    derive=_derive_fixed_deposit,
    invested=lambda fd: fd.principal,
    value=lambda fd: _derive_fixed_deposit(fd)["expected_payout"],
)

RECURRING_DEPOSIT = InstrumentKind(
    name="recurring_deposit",
    label="Recurring deposit",
    model=RecurringDeposit,
    ledger_model=RecurringDepositTransaction,
    discipline=TRANSACTION,
    statuses=("ongoing", "completed", "closed"),
    initial_status="ongoing",
    live_statuses=("ongoing", "completed"),
    terminal_statuses=("completed", "closed"),
    transitions={
        "update": (("ongoing",), None),
        "mark_installment_paid": (("ongoing",), None),
        "close": (("ongoing", "completed"), "closed"),
        "update_closed_record": (("closed",), None),
    },
    order_by=lambda m: [asc(m.status), m.next_due_date.asc().nulls_last()],
    derive=_derive_recurring_deposit,
    invested=lambda rd: _derive_recurring_deposit(rd)["total_invested"],
    value=lambda rd: _derive_recurring_deposit(rd)["maturity_value"],
)

SYSTEMATIC_INVESTMENT = InstrumentKind(
    name="sip",
    label="SIP",
    model=SystematicInvestment,
    ledger_model=SipTransaction,
    discipline=TRANSACTION,
    statuses=("ongoing", "paused", "redeemed"),
    initial_status="ongoing",
    live_statuses=("ongoing", "paused"),
    terminal_statuses=("redeemed",),
    transitions={
        "update": (("ongoing", "paused"), None),
        "add_installment": (("ongoing", "paused"), None),
        "update_nav": (("ongoing", "paused"), None),
        "update_total_units": (("ongoing", "paused"), None),
        "pause": (("ongoing",), "paused"),
        "resume": (("paused",), "ongoing"),
        "redeem": (("ongoing", "paused"), "redeemed"),
    },
    order_by=lambda m: [asc(m.status), asc(m.name)],
    derive=_derive_sip,
    invested=lambda s: s.total_invested,
    value=lambda s: _derive_sip(s)["current_value"],
)

TRADED_HOLDING = InstrumentKind(
    name="traded_holding",
    label="Holding",
    model=TradedHolding,
    ledger_model=TradedHoldingTransaction,
    discipline=TRANSACTION,
    statuses=("holding", "sold"),
    initial_status="holding",
    live_statuses=("holding",),
    terminal_statuses=("sold",),
    transitions={
        "update": (("holding",), None),
        "update_price": (("holding",), None),
        "sell": (("holding",), "sold"),
    },
    filter_fields=("market", "tile_id"),
    order_by=lambda m: [asc(m.status), asc(m.name)],
    derive=_derive_traded_holding,
    invested=lambda h: _derive_traded_holding(h)["invested_value"],
    value=lambda h: _derive_traded_holding(h)["current_value"],
)

KINDS: dict[str, InstrumentKind] = {
    kind.name: kind
    for kind in (
        LIQUID_ACCOUNT,
        VALUED_ASSET,
        COVER_PLAN,
        SAVINGS_GOAL,
        FIXED_DEPOSIT,
        RECURRING_DEPOSIT,
        SYSTEMATIC_INVESTMENT,
        TRADED_HOLDING,
    )
}


def get_kind(name: str) -> InstrumentKind:
    """Look up a kind by name.

    Raises:
        ValidationError: unknown kind name
    """
    try:
        return KINDS[name]
    except KeyError:
        raise ValidationError(f"Unknown instrument kind: {name!r}", field="kind")
