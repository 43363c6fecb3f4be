"""Lifecycle operations for every instrument class.

This is the only service that writes an instrument and its history ledger
together. Each public operation validates its inputs, loads the instrument
with a row lock, checks the requested action against the kind's transition
table, writes the instrument, records exactly one ledger entry where the
action calls for one, and commits once. Any failure rolls the whole
operation back.
"""

import logging
from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel
from sqlalchemy.orm import Session

from models.utils import utcnow
from schemas.account import (
    CoverPlanCreate,
    CoverPlanUpdate,
    LiquidAccountCreate,
    LiquidAccountUpdate,
    ValuedAssetCreate,
    ValuedAssetUpdate,
)
from schemas.deposit import (
    FixedDepositCreate,
    FixedDepositUpdate,
    RecurringDepositCreate,
    RecurringDepositUpdate,
)
from schemas.goal import SavingsGoalCreate, SavingsGoalUpdate
from schemas.investment import SipCreate, SipUpdate, TradedHoldingCreate, TradedHoldingUpdate
from services import valuation_engine as ve
from services.exceptions import ValidationError
from services.history_ledger_service import HistoryLedgerService
from services.instrument_kinds import (
    COVER_PLAN,
    FIXED_DEPOSIT,
    LIQUID_ACCOUNT,
    RECURRING_DEPOSIT,
    SAVINGS_GOAL,
    SYSTEMATIC_INVESTMENT,
    TRADED_HOLDING,
    VALUED_ASSET,
    InstrumentKind,
)
from services.instrument_store import InstrumentStore
from services.unit_of_work import atomic
from utils.schedule import CUSTOM, advance, validate_frequency

logger = logging.getLogger(__name__)

ASSET_CATEGORIES = ("asset", "investment", "plan", "life_xp")
PREMIUM_FREQUENCIES = ("monthly", "quarterly", "half_yearly", "yearly", CUSTOM)
CONTRIBUTION_FREQUENCIES = ("monthly", "quarterly", "yearly", CUSTOM)
INSTALLMENT_FREQUENCIES = ("monthly", "yearly", CUSTOM)
INVESTMENT_TYPES = ("sip", "lumpsum")
MARKETS = ("indian", "us", "crypto")


# --- Input helpers ---


def _changes(kind: InstrumentKind, data: BaseModel, partial: bool = False) -> dict:
    """Plain field dict from a request schema.

    Enum members become their values. For partial updates only fields the
    caller set are kept, and explicit nulls on NOT NULL columns are dropped.
    """
    fields = data.model_dump(exclude_unset=partial)
    fields = {k: (v.value if isinstance(v, Enum) else v) for k, v in fields.items()}
    if partial:
        columns = kind.model.__table__.columns
        fields = {
            k: v
            for k, v in fields.items()
            if v is not None or k not in columns or columns[k].nullable
        }
    return fields


def _require_name(name, kind: InstrumentKind, field: str = "name") -> str:
    if name is None or not str(name).strip():
        raise ValidationError(f"{kind.label} {field} is required", kind=kind.name, field=field)
    return str(name).strip()


def _require_positive(value, field: str, kind: InstrumentKind) -> Decimal:
    if value is None or ve.to_decimal(value) <= ve.ZERO:
        raise ValidationError(f"{field} must be positive", kind=kind.name, field=field)
    return ve.to_decimal(value)


def _require_non_negative(value, field: str, kind: InstrumentKind) -> Decimal:
    if value is None or ve.to_decimal(value) < ve.ZERO:
        raise ValidationError(f"{field} must not be negative", kind=kind.name, field=field)
    return ve.to_decimal(value)


def _require_not_before(later: date, earlier: date, later_field: str, earlier_field: str, kind: InstrumentKind):
    if later < earlier:
        raise ValidationError(
            f"{later_field} must not be before {earlier_field}",
            kind=kind.name,
            field=later_field,
        )


def _merged(instrument, fields: dict, names: tuple[str, ...]) -> dict:
    """Current values of ``names`` overlaid with the requested changes."""
    return {name: fields.get(name, getattr(instrument, name)) for name in names}


def _normalize_goal_schedule(fields: dict) -> dict:
    """Clear or validate the contribution schedule of a goal field set."""
    if not fields.get("is_repetitive"):
        fields["contribution_frequency"] = None
        fields["custom_frequency_days"] = None
        fields["next_contribution_date"] = None
        return fields

    frequency = fields.get("contribution_frequency")
    if frequency is None:
        raise ValidationError(
            "A repetitive goal needs a contribution_frequency",
            kind=SAVINGS_GOAL.name,
            field="contribution_frequency",
        )
    validate_frequency(
        frequency,
        fields.get("custom_frequency_days"),
        CONTRIBUTION_FREQUENCIES,
        field="contribution_frequency",
    )
    if frequency != CUSTOM:
        fields["custom_frequency_days"] = None
    return fields


def _validate_fixed_deposit(fields: dict) -> None:
    _require_name(fields["name"], FIXED_DEPOSIT)
    _require_positive(fields["principal"], "principal", FIXED_DEPOSIT)
    _require_non_negative(fields["stated_rate"], "stated_rate", FIXED_DEPOSIT)
    _require_not_before(
        fields["maturity_date"], fields["start_date"], "maturity_date", "start_date", FIXED_DEPOSIT
    )


def _validate_recurring_deposit(fields: dict) -> None:
    _require_name(fields["name"], RECURRING_DEPOSIT)
    _require_positive(fields["installment_amount"], "installment_amount", RECURRING_DEPOSIT)
    _require_non_negative(fields["interest_rate"], "interest_rate", RECURRING_DEPOSIT)
    if fields["total_installments"] is None or int(fields["total_installments"]) <= 0:
        raise ValidationError(
            "total_installments must be positive",
            kind=RECURRING_DEPOSIT.name,
            field="total_installments",
        )
    validate_frequency(fields["frequency"], fields["custom_frequency_days"], INSTALLMENT_FREQUENCIES)


def _validate_cover_plan(fields: dict) -> None:
    _require_name(fields["name"], COVER_PLAN)
    _require_non_negative(fields["cover_amount"], "cover_amount", COVER_PLAN)
    _require_non_negative(fields["premium_amount"], "premium_amount", COVER_PLAN)
    validate_frequency(
        fields["premium_frequency"],
        fields["custom_frequency_days"],
        PREMIUM_FREQUENCIES,
        field="premium_frequency",
    )


class LifecycleService:
    """Create, update, delete and class-specific transitions for instruments.

    Every method takes ``db`` and ``owner_id`` first and returns the
    refreshed instrument.
    """

    # --- Shared ---

    @staticmethod
    def delete(db: Session, owner_id: str, kind: InstrumentKind, instrument_id: str) -> None:
        """Delete an instrument together with its history.

        Raises:
            NotFoundError: (owner, id) does not resolve
        """
        with atomic(db):
            InstrumentStore.delete(db, owner_id, kind, instrument_id)
        logger.info("Deleted %s %s", kind.name, instrument_id)

    @staticmethod
    def _transition(db: Session, owner_id: str, kind: InstrumentKind, instrument_id: str, action: str, **fields):
        """Status-only transition plus any bookkeeping fields."""
        with atomic(db):
            instrument = InstrumentStore.get(db, owner_id, kind, instrument_id, for_update=True)
            previous = instrument.status
            target = kind.check_transition(instrument, action)
            if target is not None:
                fields["status"] = target
            InstrumentStore.apply(db, kind, instrument, **fields)
        db.refresh(instrument)
        logger.info(
            "%s %s: %s (%s -> %s)", kind.label, instrument.id, action, previous, instrument.status
        )
        return instrument

    # --- Liquid accounts ---

    @staticmethod
    def create_account(db: Session, owner_id: str, data: LiquidAccountCreate, on_date: date | None = None):
        """Create a liquid account and record its opening balance."""
        fields = _changes(LIQUID_ACCOUNT, data)
        fields["name"] = _require_name(fields.get("name"), LIQUID_ACCOUNT)
        with atomic(db):
            account = InstrumentStore.create(db, owner_id, LIQUID_ACCOUNT, **fields)
            HistoryLedgerService.upsert_snapshot(
                db, LIQUID_ACCOUNT, account.id, on_date or date.today(), account.balance
            )
        db.refresh(account)
        logger.info("Created account '%s' (id=%s)", account.name, account.id)
        return account

    @staticmethod
    def update_account(
        db: Session, owner_id: str, account_id: str, data: LiquidAccountUpdate, on_date: date | None = None
    ):
        """Update an account and overwrite today's balance snapshot."""
        fields = _changes(LIQUID_ACCOUNT, data, partial=True)
        if "name" in fields:
            fields["name"] = _require_name(fields["name"], LIQUID_ACCOUNT)
        with atomic(db):
            account = InstrumentStore.get(db, owner_id, LIQUID_ACCOUNT, account_id, for_update=True)
            InstrumentStore.apply(db, LIQUID_ACCOUNT, account, **fields)
            HistoryLedgerService.upsert_snapshot(
                db, LIQUID_ACCOUNT, account.id, on_date or date.today(), account.balance
            )
        db.refresh(account)
        logger.info("Updated account '%s' (id=%s)", account.name, account.id)
        return account

    # --- Valued assets ---

    @staticmethod
    def create_asset(db: Session, owner_id: str, data: ValuedAssetCreate, on_date: date | None = None):
        """Create a valued asset and record its opening value."""
        fields = _changes(VALUED_ASSET, data)
        fields["name"] = _require_name(fields.get("name"), VALUED_ASSET)
        _require_non_negative(fields.get("value"), "value", VALUED_ASSET)
        if fields.get("category") not in ASSET_CATEGORIES:
            raise ValidationError(
                f"category must be one of {', '.join(ASSET_CATEGORIES)}",
                kind=VALUED_ASSET.name,
                field="category",
            )
        with atomic(db):
            asset = InstrumentStore.create(db, owner_id, VALUED_ASSET, **fields)
            HistoryLedgerService.upsert_snapshot(
                db, VALUED_ASSET, asset.id, on_date or date.today(), asset.value
            )
        db.refresh(asset)
        logger.info("Created %s asset '%s' (id=%s)", asset.category, asset.name, asset.id)
        return asset

    @staticmethod
    def update_asset(
        db: Session, owner_id: str, asset_id: str, data: ValuedAssetUpdate, on_date: date | None = None
    ):
        """Update an asset and overwrite today's value snapshot."""
        fields = _changes(VALUED_ASSET, data, partial=True)
        if "name" in fields:
            fields["name"] = _require_name(fields["name"], VALUED_ASSET)
        if "value" in fields:
            _require_non_negative(fields["value"], "value", VALUED_ASSET)
        with atomic(db):
            asset = InstrumentStore.get(db, owner_id, VALUED_ASSET, asset_id, for_update=True)
            InstrumentStore.apply(db, VALUED_ASSET, asset, **fields)
            HistoryLedgerService.upsert_snapshot(
                db, VALUED_ASSET, asset.id, on_date or date.today(), asset.value
            )
        db.refresh(asset)
        logger.info("Updated asset '%s' (id=%s)", asset.name, asset.id)
        return asset

    # --- Cover plans ---

    @staticmethod
    def create_plan(db: Session, owner_id: str, data: CoverPlanCreate, on_date: date | None = None):
        """Create a cover plan and record its opening cover/premium snapshot."""
        fields = _changes(COVER_PLAN, data)
        _validate_cover_plan(fields)
        fields["name"] = fields["name"].strip()
        if fields["premium_frequency"] != CUSTOM:
            fields["custom_frequency_days"] = None
        with atomic(db):
            plan = InstrumentStore.create(db, owner_id, COVER_PLAN, **fields)
            HistoryLedgerService.upsert_snapshot(
                db,
                COVER_PLAN,
                plan.id,
                on_date or date.today(),
                plan.cover_amount,
                premium_amount=plan.premium_amount,
            )
        db.refresh(plan)
        logger.info("Created plan '%s' (id=%s)", plan.name, plan.id)
        return plan

    @staticmethod
    def update_plan(
        db: Session, owner_id: str, plan_id: str, data: CoverPlanUpdate, on_date: date | None = None
    ):
        """Update a cover plan and overwrite today's snapshot."""
        fields = _changes(COVER_PLAN, data, partial=True)
        if "name" in fields:
            fields["name"] = _require_name(fields["name"], COVER_PLAN)
        with atomic(db):
            plan = InstrumentStore.get(db, owner_id, COVER_PLAN, plan_id, for_update=True)
            merged = _merged(
                plan,
                fields,
                ("name", "cover_amount", "premium_amount", "premium_frequency", "custom_frequency_days"),
            )
            _validate_cover_plan(merged)
            if merged["premium_frequency"] != CUSTOM:
                fields["custom_frequency_days"] = None
            InstrumentStore.apply(db, COVER_PLAN, plan, **fields)
            HistoryLedgerService.upsert_snapshot(
                db,
                COVER_PLAN,
                plan.id,
                on_date or date.today(),
                plan.cover_amount,
                premium_amount=plan.premium_amount,
            )
        db.refresh(plan)
        logger.info("Updated plan '%s' (id=%s)", plan.name, plan.id)
        return plan

    # --- Savings goals ---

    @staticmethod
    def create_goal(db: Session, owner_id: str, data: SavingsGoalCreate):
        """Create an active goal with nothing saved yet."""
        fields = _changes(SAVINGS_GOAL, data)
        fields["name"] = _require_name(fields.get("name"), SAVINGS_GOAL)
        _require_non_negative(fields.get("target_amount"), "target_amount", SAVINGS_GOAL)
        fields = _normalize_goal_schedule(fields)
        fields["saved_amount"] = ve.money(ve.ZERO)
        with atomic(db):
            goal = InstrumentStore.create(db, owner_id, SAVINGS_GOAL, **fields)
        db.refresh(goal)
        logger.info("Created goal '%s' (id=%s, target=%s)", goal.name, goal.id, goal.target_amount)
        return goal

    @staticmethod
    def update_goal(db: Session, owner_id: str, goal_id: str, data: SavingsGoalUpdate):
        """Edit a goal that is not archived.

        Goal snapshots only record contributions, so edits leave the ledger as is.
        """
        fields = _changes(SAVINGS_GOAL, data, partial=True)
        if "name" in fields:
            fields["name"] = _require_name(fields["name"], SAVINGS_GOAL)
        if "target_amount" in fields:
            _require_non_negative(fields["target_amount"], "target_amount", SAVINGS_GOAL)
        with atomic(db):
            goal = InstrumentStore.get(db, owner_id, SAVINGS_GOAL, goal_id, for_update=True)
            SAVINGS_GOAL.check_transition(goal, "update")
            schedule = _merged(
                goal,
                fields,
                ("is_repetitive", "contribution_frequency", "custom_frequency_days", "next_contribution_date"),
            )
            fields.update(_normalize_goal_schedule(schedule))
            InstrumentStore.apply(db, SAVINGS_GOAL, goal, **fields)
        db.refresh(goal)
        logger.info("Updated goal '%s' (id=%s)", goal.name, goal.id)
        return goal

    @staticmethod
    def contribute(
        db: Session,
        owner_id: str,
        goal_id: str,
        amount,
        notes: str | None = None,
        on_date: date | None = None,
    ):
        """Add (or, when negative, withdraw) money from a goal.

        The day's snapshot holds the running total saved and the net amount
        contributed that day; repeated contributions on one date accumulate.

        Raises:
            ValidationError: zero amount, or a withdrawal larger than the saved amount
            InvalidTransitionError: goal is archived
        """
        return LifecycleService._record_contribution(
            db, owner_id, goal_id, amount, notes, on_date, "contribute"
        )

    @staticmethod
    def mark_contribution_done(
        db: Session,
        owner_id: str,
        goal_id: str,
        amount,
        notes: str | None = None,
        on_date: date | None = None,
    ):
        """Record a scheduled contribution and roll the schedule forward.

        Repetitive goals move ``next_contribution_date`` one period past its
        current value (or past ``on_date`` when none is set).
        """
        return LifecycleService._record_contribution(
            db, owner_id, goal_id, amount, notes, on_date, "mark_contribution_done"
        )

    @staticmethod
    def _record_contribution(db, owner_id, goal_id, amount, notes, on_date, action):
        amount = ve.money(amount)
        if amount == ve.ZERO:
            raise ValidationError("Contribution amount must not be zero", kind=SAVINGS_GOAL.name, field="amount")
        on_date = on_date or date.today()

        with atomic(db):
            goal = InstrumentStore.get(db, owner_id, SAVINGS_GOAL, goal_id, for_update=True)
            SAVINGS_GOAL.check_transition(goal, action)

            saved = ve.money(goal.saved_amount + amount)
            if saved < ve.ZERO:
                raise ValidationError(
                    f"Cannot withdraw {-amount}; only {goal.saved_amount} is saved",
                    kind=SAVINGS_GOAL.name,
                    field="amount",
                )
            fields = {"saved_amount": saved}
            if action == "mark_contribution_done" and goal.is_repetitive and goal.contribution_frequency:
                fields["next_contribution_date"] = advance(
                    goal.next_contribution_date or on_date,
                    goal.contribution_frequency,
                    1,
                    goal.custom_frequency_days,
                )
            InstrumentStore.apply(db, SAVINGS_GOAL, goal, **fields)

            existing = HistoryLedgerService.find_snapshot(db, SAVINGS_GOAL, goal.id, on_date)
            day_total = amount
            if existing is not None and existing.amount is not None:
                day_total = ve.money(existing.amount + amount)
            HistoryLedgerService.upsert_snapshot(
                db, SAVINGS_GOAL, goal.id, on_date, saved, notes, amount=day_total
            )
        db.refresh(goal)
        logger.info("Goal %s: %s %s (saved=%s)", goal.id, action, amount, goal.saved_amount)
        return goal

    @staticmethod
    def mark_goal_achieved(db: Session, owner_id: str, goal_id: str):
        return LifecycleService._transition(db, owner_id, SAVINGS_GOAL, goal_id, "mark_achieved")

    @staticmethod
    def reactivate_goal(db: Session, owner_id: str, goal_id: str):
        return LifecycleService._transition(db, owner_id, SAVINGS_GOAL, goal_id, "reactivate")

    @staticmethod
    def archive_goal(db: Session, owner_id: str, goal_id: str):
        return LifecycleService._transition(db, owner_id, SAVINGS_GOAL, goal_id, "archive")

    # --- Fixed-term deposits ---

    @staticmethod
    def create_fixed_deposit(db: Session, owner_id: str, data: FixedDepositCreate):
        """Open a fixed deposit and record the ``open`` transaction."""
        fields = _changes(FIXED_DEPOSIT, data)
        _validate_fixed_deposit(fields)
        fields["name"] = fields["name"].strip()
        with atomic(db):
            fd = InstrumentStore.create(db, owner_id, FIXED_DEPOSIT, **fields)
            HistoryLedgerService.append_transaction(
                db, FIXED_DEPOSIT, fd.id, fd.start_date, "open", amount=fd.principal
            )
        db.refresh(fd)
        logger.info(
            "Opened fixed deposit '%s' (id=%s, principal=%s @ %s%%)",
            fd.name, fd.id, fd.principal, fd.stated_rate,
        )
        return fd

    @staticmethod
    def update_fixed_deposit(db: Session, owner_id: str, fd_id: str, data: FixedDepositUpdate):
        """Edit an ongoing fixed deposit; the expected payout follows on read."""
        fields = _changes(FIXED_DEPOSIT, data, partial=True)
        with atomic(db):
            fd = InstrumentStore.get(db, owner_id, FIXED_DEPOSIT, fd_id, for_update=True)
            FIXED_DEPOSIT.check_transition(fd, "update")
            _validate_fixed_deposit(
                _merged(fd, fields, ("name", "principal", "stated_rate", "start_date", "maturity_date"))
            )
            InstrumentStore.apply(db, FIXED_DEPOSIT, fd, **fields)
        db.refresh(fd)
        logger.info("Updated fixed deposit '%s' (id=%s)", fd.name, fd.id)
        return fd

    @staticmethod
    def close_fixed_deposit(
        db: Session, owner_id: str, fd_id: str, actual_payout, closed_date: date, notes: str | None = None
    ):
        """Close an ongoing fixed deposit at the payout actually received.

        The realized rate is solved from the payout and stored next to the
        stated rate, which is never overwritten.
        """
        return LifecycleService._settle_fixed_deposit(
            db, owner_id, fd_id, "close", "close", actual_payout, closed_date, notes
        )

    @staticmethod
    def update_closed_fixed_deposit(
        db: Session, owner_id: str, fd_id: str, actual_payout, closed_date: date, notes: str | None = None
    ):
        """Correct the payout or closing date of a closed fixed deposit."""
        return LifecycleService._settle_fixed_deposit(
            db, owner_id, fd_id, "update_closed_record", "close_correction", actual_payout, closed_date, notes
        )

    @staticmethod
    def _settle_fixed_deposit(db, owner_id, fd_id, action, tx_kind, actual_payout, closed_date, notes):
        payout = ve.money(_require_non_negative(actual_payout, "actual_payout", FIXED_DEPOSIT))
        with atomic(db):
            fd = InstrumentStore.get(db, owner_id, FIXED_DEPOSIT, fd_id, for_update=True)
            target = FIXED_DEPOSIT.check_transition(fd, action)
            _require_not_before(closed_date, fd.start_date, "closed_date", "start_date", FIXED_DEPOSIT)

            fields = {
                "actual_payout": payout,
                "closed_date": closed_date,
                "realized_rate": ve.realized_rate(fd.principal, payout, fd.start_date, closed_date),
            }
            if target is not None:
                fields["status"] = target
            if notes is not None:
                fields["notes"] = notes
            InstrumentStore.apply(db, FIXED_DEPOSIT, fd, **fields)
            HistoryLedgerService.append_transaction(
                db, FIXED_DEPOSIT, fd.id, closed_date, tx_kind, amount=payout, notes=notes
            )
        db.refresh(fd)
        logger.info(
            "Fixed deposit %s: %s (payout=%s, realized rate=%s%%)",
            fd.id, action, fd.actual_payout, fd.realized_rate,
        )
        return fd

    # --- Recurring deposits ---

    @staticmethod
    def create_recurring_deposit(db: Session, owner_id: str, data: RecurringDepositCreate):
        """Open a recurring deposit; the first installment falls due on the start date."""
        fields = _changes(RECURRING_DEPOSIT, data)
        _validate_recurring_deposit(fields)
        fields["name"] = fields["name"].strip()
        if fields["frequency"] != CUSTOM:
            fields["custom_frequency_days"] = None
        fields["installments_paid"] = 0
        fields["next_due_date"] = fields["start_date"]
        with atomic(db):
            rd = InstrumentStore.create(db, owner_id, RECURRING_DEPOSIT, **fields)
        db.refresh(rd)
        logger.info(
            "Opened recurring deposit '%s' (id=%s, %s x %s %s)",
            rd.name, rd.id, rd.total_installments, rd.installment_amount, rd.frequency,
        )
        return rd

    @staticmethod
    def update_recurring_deposit(db: Session, owner_id: str, rd_id: str, data: RecurringDepositUpdate):
        """Edit an ongoing recurring deposit.

        The next due date is recomputed from the start date and the number of
        installments already paid.
        """
        fields = _changes(RECURRING_DEPOSIT, data, partial=True)
        with atomic(db):
            rd = InstrumentStore.get(db, owner_id, RECURRING_DEPOSIT, rd_id, for_update=True)
            RECURRING_DEPOSIT.check_transition(rd, "update")
            merged = _merged(
                rd,
                fields,
                (
                    "name", "installment_amount", "interest_rate", "total_installments",
                    "frequency", "custom_frequency_days", "start_date",
                ),
            )
            _validate_recurring_deposit(merged)
            if merged["total_installments"] <= rd.installments_paid:
                raise ValidationError(
                    f"total_installments must exceed the {rd.installments_paid} already paid",
                    kind=RECURRING_DEPOSIT.name,
                    field="total_installments",
                )
            if merged["frequency"] != CUSTOM:
                fields["custom_frequency_days"] = None
            fields["next_due_date"] = advance(
                merged["start_date"],
                merged["frequency"],
                rd.installments_paid,
                merged["custom_frequency_days"],
            )
            InstrumentStore.apply(db, RECURRING_DEPOSIT, rd, **fields)
        db.refresh(rd)
        logger.info("Updated recurring deposit '%s' (id=%s)", rd.name, rd.id)
        return rd

    @staticmethod
    def mark_installment_paid(
        db: Session, owner_id: str, rd_id: str, paid_date: date | None = None, notes: str | None = None
    ):
        """Record the next installment as paid.

        Paying the last installment completes the deposit and clears the
        next due date; otherwise the due date moves to start + paid periods.

        Raises:
            InvalidTransitionError: deposit is not ongoing
        """
        with atomic(db):
            rd = InstrumentStore.get(db, owner_id, RECURRING_DEPOSIT, rd_id, for_update=True)
            RECURRING_DEPOSIT.check_transition(rd, "mark_installment_paid")

            paid = rd.installments_paid + 1
            fields = {"installments_paid": paid}
            if paid >= rd.total_installments:
                fields["status"] = "completed"
                fields["next_due_date"] = None
            else:
                fields["next_due_date"] = advance(
                    rd.start_date, rd.frequency, paid, rd.custom_frequency_days
                )
            InstrumentStore.apply(db, RECURRING_DEPOSIT, rd, **fields)
            HistoryLedgerService.append_transaction(
                db,
                RECURRING_DEPOSIT,
                rd.id,
                paid_date or date.today(),
                "installment",
                amount=rd.installment_amount,
                notes=notes or f"Installment {paid} of {rd.total_installments}",
            )
        db.refresh(rd)
        logger.info(
            "Recurring deposit %s: installment %s/%s paid (status=%s)",
            rd.id, rd.installments_paid, rd.total_installments, rd.status,
        )
        return rd

    @staticmethod
    def close_recurring_deposit(
        db: Session,
        owner_id: str,
        rd_id: str,
        actual_withdrawal,
        closed_date: date,
        notes: str | None = None,
    ):
        """Close an ongoing or completed recurring deposit."""
        return LifecycleService._settle_recurring_deposit(
            db, owner_id, rd_id, "close", "close", actual_withdrawal, closed_date, notes
        )

    @staticmethod
    def update_closed_recurring_deposit(
        db: Session,
        owner_id: str,
        rd_id: str,
        actual_withdrawal,
        closed_date: date,
        notes: str | None = None,
    ):
        """Correct the withdrawal or closing date of a closed recurring deposit."""
        return LifecycleService._settle_recurring_deposit(
            db, owner_id, rd_id, "update_closed_record", "close_correction", actual_withdrawal, closed_date, notes
        )

    @staticmethod
    def _settle_recurring_deposit(db, owner_id, rd_id, action, tx_kind, actual_withdrawal, closed_date, notes):
        withdrawal = ve.money(
            _require_non_negative(actual_withdrawal, "actual_withdrawal", RECURRING_DEPOSIT)
        )
        with atomic(db):
            rd = InstrumentStore.get(db, owner_id, RECURRING_DEPOSIT, rd_id, for_update=True)
            target = RECURRING_DEPOSIT.check_transition(rd, action)
            _require_not_before(closed_date, rd.start_date, "closed_date", "start_date", RECURRING_DEPOSIT)

            fields = {
                "actual_withdrawal": withdrawal,
                "closed_date": closed_date,
                "next_due_date": None,
            }
            if target is not None:
                fields["status"] = target
            if notes is not None:
                fields["notes"] = notes
            InstrumentStore.apply(db, RECURRING_DEPOSIT, rd, **fields)
            HistoryLedgerService.append_transaction(
                db, RECURRING_DEPOSIT, rd.id, closed_date, tx_kind, amount=withdrawal, notes=notes
            )
        db.refresh(rd)
        logger.info("Recurring deposit %s: %s (withdrawal=%s)", rd.id, action, rd.actual_withdrawal)
        return rd

    # --- Systematic investments ---

    @staticmethod
    def create_sip(db: Session, owner_id: str, data: SipCreate):
        """Start a SIP and record its first ``sip``/``lumpsum`` transaction.

        Units default to invested amount / NAV.
        """
        fields = _changes(SYSTEMATIC_INVESTMENT, data)
        investment_type = fields.pop("investment_type")
        invested = fields.pop("invested_amount")
        units = fields.pop("total_units")

        fields["name"] = _require_name(fields.get("name"), SYSTEMATIC_INVESTMENT)
        _require_positive(fields.get("sip_amount"), "sip_amount", SYSTEMATIC_INVESTMENT)
        nav = _require_positive(fields.get("current_nav"), "nav", SYSTEMATIC_INVESTMENT)
        if investment_type not in INVESTMENT_TYPES:
            raise ValidationError(
                f"investment_type must be one of {', '.join(INVESTMENT_TYPES)}",
                kind=SYSTEMATIC_INVESTMENT.name,
                field="investment_type",
            )
        invested = ve.money(invested if invested is not None else fields["sip_amount"])
        if units is None:
            units = ve.units_for_amount(invested, nav)
        else:
            units = ve.units(_require_non_negative(units, "total_units", SYSTEMATIC_INVESTMENT))

        fields.update(total_invested=invested, total_units=units)
        with atomic(db):
            sip = InstrumentStore.create(db, owner_id, SYSTEMATIC_INVESTMENT, **fields)
            HistoryLedgerService.append_transaction(
                db,
                SYSTEMATIC_INVESTMENT,
                sip.id,
                sip.start_date,
                investment_type,
                amount=invested,
                price=nav,
                units=units,
            )
        db.refresh(sip)
        logger.info("Started SIP '%s' (id=%s, invested=%s, units=%s)", sip.name, sip.id, invested, units)
        return sip

    @staticmethod
    def update_sip(db: Session, owner_id: str, sip_id: str, data: SipUpdate):
        """Edit a SIP's descriptive fields; rejected once redeemed."""
        fields = _changes(SYSTEMATIC_INVESTMENT, data, partial=True)
        if "name" in fields:
            fields["name"] = _require_name(fields["name"], SYSTEMATIC_INVESTMENT)
        if "sip_amount" in fields:
            _require_positive(fields["sip_amount"], "sip_amount", SYSTEMATIC_INVESTMENT)
        with atomic(db):
            sip = InstrumentStore.get(db, owner_id, SYSTEMATIC_INVESTMENT, sip_id, for_update=True)
            SYSTEMATIC_INVESTMENT.check_transition(sip, "update")
            InstrumentStore.apply(db, SYSTEMATIC_INVESTMENT, sip, **fields)
        db.refresh(sip)
        logger.info("Updated SIP '%s' (id=%s)", sip.name, sip.id)
        return sip

    @staticmethod
    def add_sip_installment(
        db: Session,
        owner_id: str,
        sip_id: str,
        amount,
        nav,
        on_date: date | None = None,
        investment_type: str = "sip",
        notes: str | None = None,
    ):
        """Invest ``amount`` at ``nav``: adds amount/NAV units and the amount invested."""
        amount = ve.money(_require_positive(amount, "amount", SYSTEMATIC_INVESTMENT))
        if isinstance(investment_type, Enum):
            investment_type = investment_type.value
        if investment_type not in INVESTMENT_TYPES:
            raise ValidationError(
                f"investment_type must be one of {', '.join(INVESTMENT_TYPES)}",
                kind=SYSTEMATIC_INVESTMENT.name,
                field="investment_type",
            )
        new_units = ve.units_for_amount(amount, nav)
        nav = ve.to_decimal(nav)

        with atomic(db):
            sip = InstrumentStore.get(db, owner_id, SYSTEMATIC_INVESTMENT, sip_id, for_update=True)
            SYSTEMATIC_INVESTMENT.check_transition(sip, "add_installment")
            InstrumentStore.apply(
                db,
                SYSTEMATIC_INVESTMENT,
                sip,
                total_units=ve.units(sip.total_units + new_units),
                total_invested=ve.money(sip.total_invested + amount),
                current_nav=nav,
            )
            HistoryLedgerService.append_transaction(
                db,
                SYSTEMATIC_INVESTMENT,
                sip.id,
                on_date or date.today(),
                investment_type,
                amount=amount,
                price=nav,
                units=new_units,
                notes=notes,
            )
        db.refresh(sip)
        logger.info("SIP %s: %s of %s at NAV %s (+%s units)", sip.id, investment_type, amount, nav, new_units)
        return sip

    @staticmethod
    def update_sip_nav(db: Session, owner_id: str, sip_id: str, nav, on_date: date | None = None):
        """Set the current NAV; repeating with the same NAV leaves the SIP unchanged."""
        nav = _require_positive(nav, "nav", SYSTEMATIC_INVESTMENT)
        with atomic(db):
            sip = InstrumentStore.get(db, owner_id, SYSTEMATIC_INVESTMENT, sip_id, for_update=True)
            SYSTEMATIC_INVESTMENT.check_transition(sip, "update_nav")
            InstrumentStore.apply(db, SYSTEMATIC_INVESTMENT, sip, current_nav=nav)
            HistoryLedgerService.append_transaction(
                db, SYSTEMATIC_INVESTMENT, sip.id, on_date or date.today(), "nav_update", price=nav
            )
        db.refresh(sip)
        logger.info("SIP %s: NAV updated to %s", sip.id, nav)
        return sip

    @staticmethod
    def update_sip_units(db: Session, owner_id: str, sip_id: str, total_units, on_date: date | None = None):
        """Overwrite the unit count (e.g. to match a statement)."""
        total_units = ve.units(_require_non_negative(total_units, "total_units", SYSTEMATIC_INVESTMENT))
        with atomic(db):
            sip = InstrumentStore.get(db, owner_id, SYSTEMATIC_INVESTMENT, sip_id, for_update=True)
            SYSTEMATIC_INVESTMENT.check_transition(sip, "update_total_units")
            InstrumentStore.apply(db, SYSTEMATIC_INVESTMENT, sip, total_units=total_units)
            HistoryLedgerService.append_transaction(
                db,
                SYSTEMATIC_INVESTMENT,
                sip.id,
                on_date or date.today(),
                "units_update",
                price=sip.current_nav,
                units=total_units,
            )
        db.refresh(sip)
        logger.info("SIP %s: total units set to %s", sip.id, total_units)
        return sip

    @staticmethod
    def pause_sip(db: Session, owner_id: str, sip_id: str, on_date: date | None = None):
        return LifecycleService._transition(
            db, owner_id, SYSTEMATIC_INVESTMENT, sip_id, "pause", paused_date=on_date or date.today()
        )

    @staticmethod
    def resume_sip(db: Session, owner_id: str, sip_id: str):
        return LifecycleService._transition(
            db, owner_id, SYSTEMATIC_INVESTMENT, sip_id, "resume", paused_date=None
        )

    @staticmethod
    def redeem_sip(
        db: Session,
        owner_id: str,
        sip_id: str,
        redeemed_amount,
        on_date: date | None = None,
        notes: str | None = None,
    ):
        """Fully redeem a SIP. Redeemed SIPs accept no further changes."""
        redeemed_amount = ve.money(
            _require_non_negative(redeemed_amount, "redeemed_amount", SYSTEMATIC_INVESTMENT)
        )
        on_date = on_date or date.today()
        with atomic(db):
            sip = InstrumentStore.get(db, owner_id, SYSTEMATIC_INVESTMENT, sip_id, for_update=True)
            target = SYSTEMATIC_INVESTMENT.check_transition(sip, "redeem")
            InstrumentStore.apply(
                db,
                SYSTEMATIC_INVESTMENT,
                sip,
                status=target,
                redeemed_amount=redeemed_amount,
                redeemed_date=on_date,
            )
            HistoryLedgerService.append_transaction(
                db,
                SYSTEMATIC_INVESTMENT,
                sip.id,
                on_date,
                "redeem",
                amount=redeemed_amount,
                price=sip.current_nav,
                units=sip.total_units,
                notes=notes,
            )
        db.refresh(sip)
        logger.info("SIP %s redeemed for %s", sip.id, redeemed_amount)
        return sip

    # --- Traded holdings ---

    @staticmethod
    def create_holding(db: Session, owner_id: str, data: TradedHoldingCreate):
        """Record a bought holding and its ``buy`` transaction.

        The buy price is taken as given or derived from invested value /
        quantity; the current price defaults to the buy price.
        """
        fields = _changes(TRADED_HOLDING, data)
        invested_value = fields.pop("invested_value")

        if fields.get("market") not in MARKETS:
            raise ValidationError(
                f"market must be one of {', '.join(MARKETS)}", kind=TRADED_HOLDING.name, field="market"
            )
        fields["symbol"] = _require_name(fields.get("symbol"), TRADED_HOLDING, field="symbol").upper()
        quantity = _require_positive(fields.get("quantity"), "quantity", TRADED_HOLDING)
        if fields.get("buy_price") is None:
            if invested_value is None:
                raise ValidationError(
                    "Either buy_price or invested_value is required",
                    kind=TRADED_HOLDING.name,
                    field="buy_price",
                )
            invested_value = _require_positive(invested_value, "invested_value", TRADED_HOLDING)
            fields["buy_price"] = ve.units(invested_value / quantity)
        buy_price = _require_positive(fields["buy_price"], "buy_price", TRADED_HOLDING)
        if fields.get("current_price") is None:
            fields["current_price"] = buy_price
        fields["name"] = fields.get("name") or fields["symbol"]
        fields["price_updated_at"] = utcnow()

        with atomic(db):
            holding = InstrumentStore.create(db, owner_id, TRADED_HOLDING, **fields)
            HistoryLedgerService.append_transaction(
                db,
                TRADED_HOLDING,
                holding.id,
                holding.buy_date,
                "buy",
                amount=ve.money(invested_value if invested_value is not None else quantity * buy_price),
                price=buy_price,
                units=quantity,
            )
        db.refresh(holding)
        logger.info(
            "Recorded %s holding %s (id=%s, qty=%s @ %s)",
            holding.market, holding.symbol, holding.id, holding.quantity, holding.buy_price,
        )
        return holding

    @staticmethod
    def update_holding(db: Session, owner_id: str, holding_id: str, data: TradedHoldingUpdate):
        """Edit a holding that has not been sold.

        An ``invested_value`` re-derives the buy price from the (possibly
        new) quantity.
        """
        fields = _changes(TRADED_HOLDING, data, partial=True)
        invested_value = fields.pop("invested_value", None)
        if "quantity" in fields:
            _require_positive(fields["quantity"], "quantity", TRADED_HOLDING)
        with atomic(db):
            holding = InstrumentStore.get(db, owner_id, TRADED_HOLDING, holding_id, for_update=True)
            TRADED_HOLDING.check_transition(holding, "update")
            if invested_value is not None:
                quantity = ve.to_decimal(fields.get("quantity", holding.quantity))
                invested_value = _require_positive(invested_value, "invested_value", TRADED_HOLDING)
                fields["buy_price"] = ve.units(invested_value / quantity)
            if "current_price" in fields:
                fields["price_updated_at"] = utcnow()
            InstrumentStore.apply(db, TRADED_HOLDING, holding, **fields)
        db.refresh(holding)
        logger.info("Updated holding %s (id=%s)", holding.symbol, holding.id)
        return holding

    @staticmethod
    def update_holding_price(
        db: Session, owner_id: str, holding_id: str, current_price, on_date: date | None = None
    ):
        """Set the current market price; repeating with the same price leaves the holding unchanged."""
        current_price = _require_positive(current_price, "current_price", TRADED_HOLDING)
        with atomic(db):
            holding = InstrumentStore.get(db, owner_id, TRADED_HOLDING, holding_id, for_update=True)
            TRADED_HOLDING.check_transition(holding, "update_price")
            InstrumentStore.apply(
                db, TRADED_HOLDING, holding, current_price=current_price, price_updated_at=utcnow()
            )
            HistoryLedgerService.append_transaction(
                db, TRADED_HOLDING, holding.id, on_date or date.today(), "price_update", price=current_price
            )
        db.refresh(holding)
        logger.info("Holding %s: price updated to %s", holding.symbol, current_price)
        return holding

    @staticmethod
    def sell_holding(
        db: Session, owner_id: str, holding_id: str, sell_price, sell_date: date, notes: str | None = None
    ):
        """Sell the whole position; the sell price becomes the current price."""
        sell_price = _require_positive(sell_price, "sell_price", TRADED_HOLDING)
        with atomic(db):
            holding = InstrumentStore.get(db, owner_id, TRADED_HOLDING, holding_id, for_update=True)
            target = TRADED_HOLDING.check_transition(holding, "sell")
            _require_not_before(sell_date, holding.buy_date, "sell_date", "buy_date", TRADED_HOLDING)
            InstrumentStore.apply(
                db,
                TRADED_HOLDING,
                holding,
                status=target,
                sell_price=sell_price,
                sell_date=sell_date,
                current_price=sell_price,
                price_updated_at=utcnow(),
            )
            HistoryLedgerService.append_transaction(
                db,
                TRADED_HOLDING,
                holding.id,
                sell_date,
                "sell",
                amount=ve.money(holding.quantity * sell_price),
                price=sell_price,
                units=holding.quantity,
                notes=notes,
            )
        db.refresh(holding)
        logger.info("Sold holding %s (id=%s) at %s", holding.symbol, holding.id, sell_price)
        return holding
