"""Tests for the instrument kind registry and transition tables."""

from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from services.exceptions import InvalidTransitionError, ValidationError
from services.instrument_kinds import (
    COVER_PLAN,
    FIXED_DEPOSIT,
    KINDS,
    LIQUID_ACCOUNT,
    RECURRING_DEPOSIT,
    SAVINGS_GOAL,
    SYSTEMATIC_INVESTMENT,
    TRADED_HOLDING,
    get_kind,
)


def _with_status(status):
    return SimpleNamespace(status=status)


class TestRegistry:
    def test_all_eight_kinds_registered(self):
        assert set(KINDS) == {
            "liquid_account",
            "valued_asset",
            "cover_plan",
            "savings_goal",
            "fixed_deposit",
            "recurring_deposit",
            "sip",
            "traded_holding",
        }

    def test_get_kind(self):
        assert get_kind("fixed_deposit") is FIXED_DEPOSIT

    def test_get_unknown_kind_raises(self):
        with pytest.raises(ValidationError):
            get_kind("bond")

    def test_ledger_disciplines(self):
        for kind in (LIQUID_ACCOUNT, COVER_PLAN, SAVINGS_GOAL):
            assert kind.is_snapshot_ledger
        for kind in (FIXED_DEPOSIT, RECURRING_DEPOSIT, SYSTEMATIC_INVESTMENT, TRADED_HOLDING):
            assert not kind.is_snapshot_ledger


class TestCheckTransition:
    """Legal and illegal actions per status."""

    @pytest.mark.parametrize(
        "kind,status,action,target",
        [
            (FIXED_DEPOSIT, "ongoing", "close", "closed"),
            (FIXED_DEPOSIT, "closed", "update_closed_record", None),
            (RECURRING_DEPOSIT, "ongoing", "mark_installment_paid", None),
            (RECURRING_DEPOSIT, "completed", "close", "closed"),
            (SYSTEMATIC_INVESTMENT, "ongoing", "pause", "paused"),
            (SYSTEMATIC_INVESTMENT, "paused", "resume", "ongoing"),
            (SYSTEMATIC_INVESTMENT, "paused", "redeem", "redeemed"),
            (TRADED_HOLDING, "holding", "sell", "sold"),
            (SAVINGS_GOAL, "archived", "reactivate", "active"),
            (SAVINGS_GOAL, "achieved", "archive", "archived"),
        ],
    )
    def test_legal_transition(self, kind, status, action, target):
        assert kind.check_transition(_with_status(status), action) == target

    @pytest.mark.parametrize(
        "kind,status,action",
        [
            (FIXED_DEPOSIT, "closed", "close"),
            (FIXED_DEPOSIT, "closed", "update"),
            (FIXED_DEPOSIT, "ongoing", "update_closed_record"),
            (RECURRING_DEPOSIT, "completed", "mark_installment_paid"),
            (RECURRING_DEPOSIT, "completed", "update"),
            (RECURRING_DEPOSIT, "closed", "close"),
            (SYSTEMATIC_INVESTMENT, "redeemed", "update_nav"),
            (SYSTEMATIC_INVESTMENT, "redeemed", "add_installment"),
            (SYSTEMATIC_INVESTMENT, "paused", "pause"),
            (SYSTEMATIC_INVESTMENT, "ongoing", "resume"),
            (TRADED_HOLDING, "sold", "update_price"),
            (TRADED_HOLDING, "sold", "sell"),
            (SAVINGS_GOAL, "archived", "contribute"),
            (SAVINGS_GOAL, "archived", "update"),
            (SAVINGS_GOAL, "achieved", "mark_achieved"),
            (SAVINGS_GOAL, "active", "reactivate"),
        ],
    )
    def test_illegal_transition(self, kind, status, action):
        with pytest.raises(InvalidTransitionError) as exc_info:
            kind.check_transition(_with_status(status), action)
        assert exc_info.value.status == status
        assert exc_info.value.action == action
        assert exc_info.value.kind == kind.name

    def test_unknown_action_raises(self):
        with pytest.raises(InvalidTransitionError):
            FIXED_DEPOSIT.check_transition(_with_status("ongoing"), "pause")

    def test_stateless_kinds_accept_any_action(self):
        assert LIQUID_ACCOUNT.check_transition(SimpleNamespace(), "update") is None


class TestDerivedFields:
    def test_fixed_deposit_effective_rate_follows_status(self):
        fd = SimpleNamespace(
            principal=Decimal("100000"),
            stated_rate=Decimal("7"),
            realized_rate=None,
            start_date=date(2025, 1, 1),
            maturity_date=date(2026, 1, 1),
            status="ongoing",
        )
        derived = FIXED_DEPOSIT.derived_fields(fd)
        assert derived["expected_payout"] == Decimal("107000.00")
        assert derived["effective_rate"] == Decimal("7")

        fd.status = "closed"
        fd.realized_rate = Decimal("6.5")
        assert FIXED_DEPOSIT.derived_fields(fd)["effective_rate"] == Decimal("6.5")

    def test_cover_plan_expiry(self):
        expired = SimpleNamespace(expiry_date=date.today() - timedelta(days=1))
        current = SimpleNamespace(expiry_date=date.today())
        open_ended = SimpleNamespace(expiry_date=None)
        assert COVER_PLAN.derived_fields(expired)["is_expired"] is True
        assert COVER_PLAN.derived_fields(current)["is_expired"] is False
        assert COVER_PLAN.derived_fields(open_ended)["is_expired"] is False

    def test_recurring_deposit_remaining_never_negative(self):
        rd = SimpleNamespace(
            installment_amount=Decimal("1000"),
            interest_rate=Decimal("0"),
            frequency="monthly",
            custom_frequency_days=None,
            total_installments=12,
            installments_paid=12,
        )
        derived = RECURRING_DEPOSIT.derived_fields(rd)
        assert derived["installments_remaining"] == 0
        assert derived["total_invested"] == Decimal("12000.00")
        assert derived["maturity_value"] == Decimal("12000.00")

    def test_live_statuses(self):
        assert RECURRING_DEPOSIT.is_live(_with_status("completed"))
        assert not RECURRING_DEPOSIT.is_live(_with_status("closed"))
        assert SYSTEMATIC_INVESTMENT.is_live(_with_status("paused"))
        assert not SYSTEMATIC_INVESTMENT.is_live(_with_status("redeemed"))
        assert not SAVINGS_GOAL.is_live(_with_status("achieved"))
        assert LIQUID_ACCOUNT.is_live(SimpleNamespace())
