"""Tests for SIP and traded holding lifecycles."""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from schemas.investment import SipUpdate, TradedHoldingUpdate
from services.exceptions import InvalidTransitionError, NotFoundError, PersistenceError, ValidationError
from services.history_ledger_service import HistoryLedgerService
from services.instrument_kinds import SYSTEMATIC_INVESTMENT, TRADED_HOLDING
from services.lifecycle_service import LifecycleService
from tests.fixtures import OTHER_OWNER_ID, OWNER_ID, make_holding, make_sip


def _ledger(db, kind, instrument_id):
    return HistoryLedgerService.list_by_instrument(db, OWNER_ID, kind, instrument_id)


def _state(sip):
    return (sip.status, sip.total_units, sip.current_nav, sip.total_invested)


class TestCreateSip:
    def test_units_default_to_amount_over_nav(self, db, sip):
        assert sip.status == "ongoing"
        assert sip.total_units == Decimal("100.0000")
        assert sip.total_invested == Decimal("5000.00")

        entries = _ledger(db, SYSTEMATIC_INVESTMENT, sip.id)
        assert len(entries) == 1
        assert entries[0].kind == "sip"
        assert entries[0].date == date(2025, 1, 5)
        assert entries[0].price == Decimal("50.0000")
        assert entries[0].units == Decimal("100")

    def test_lumpsum_with_invested_amount(self, db):
        sip = make_sip(
            db, investment_type="lumpsum", invested_amount=Decimal("20000"), current_nav=Decimal("40")
        )
        assert sip.total_units == Decimal("500.0000")
        assert sip.total_invested == Decimal("20000.00")
        assert _ledger(db, SYSTEMATIC_INVESTMENT, sip.id)[0].kind == "lumpsum"

    def test_explicit_units_kept(self, db):
        sip = make_sip(db, total_units=Decimal("98.1234"))
        assert sip.total_units == Decimal("98.1234")


class TestSipTransactions:
    def test_add_installment(self, db, sip):
        sip = LifecycleService.add_sip_installment(
            db, OWNER_ID, sip.id, Decimal("5000"), Decimal("62.5"), on_date=date(2025, 2, 5)
        )
        assert sip.total_units == Decimal("180.0000")
        assert sip.total_invested == Decimal("10000.00")
        assert sip.current_nav == Decimal("62.5000")

        derived = SYSTEMATIC_INVESTMENT.derived_fields(sip)
        assert derived["current_value"] == Decimal("11250.00")
        assert derived["returns_percent"] == Decimal("12.5000")

        entries = _ledger(db, SYSTEMATIC_INVESTMENT, sip.id)
        assert [e.kind for e in entries] == ["sip", "sip"]
        assert entries[0].units == Decimal("80")

    def test_add_lumpsum(self, db, sip):
        LifecycleService.add_sip_installment(
            db, OWNER_ID, sip.id, Decimal("1000"), Decimal("50"), investment_type="lumpsum"
        )
        assert _ledger(db, SYSTEMATIC_INVESTMENT, sip.id)[0].kind == "lumpsum"

    def test_add_installment_rejects_bad_nav(self, db, sip):
        with pytest.raises(ValidationError):
            LifecycleService.add_sip_installment(db, OWNER_ID, sip.id, Decimal("1000"), Decimal("0"))
        assert len(_ledger(db, SYSTEMATIC_INVESTMENT, sip.id)) == 1

    def test_add_installment_rejects_unknown_type(self, db, sip):
        with pytest.raises(ValidationError):
            LifecycleService.add_sip_installment(
                db, OWNER_ID, sip.id, Decimal("1000"), Decimal("50"), investment_type="dividend"
            )

    def test_nav_update_is_idempotent(self, db, sip):
        first = _state(LifecycleService.update_sip_nav(db, OWNER_ID, sip.id, Decimal("55")))
        second = _state(LifecycleService.update_sip_nav(db, OWNER_ID, sip.id, Decimal("55")))

        assert first == second
        kinds = [e.kind for e in _ledger(db, SYSTEMATIC_INVESTMENT, sip.id)]
        assert kinds.count("nav_update") == 2

    def test_update_total_units(self, db, sip):
        sip = LifecycleService.update_sip_units(db, OWNER_ID, sip.id, Decimal("101.5"))
        assert sip.total_units == Decimal("101.5000")
        entry = _ledger(db, SYSTEMATIC_INVESTMENT, sip.id)[0]
        assert entry.kind == "units_update"
        assert entry.units == Decimal("101.5")

    def test_update_descriptive_fields(self, db, sip):
        sip = LifecycleService.update_sip(db, OWNER_ID, sip.id, SipUpdate(sip_amount=Decimal("7500")))
        assert sip.sip_amount == Decimal("7500.00")
        assert len(_ledger(db, SYSTEMATIC_INVESTMENT, sip.id)) == 1


class TestSipStatus:
    def test_pause_and_resume(self, db, sip):
        paused = LifecycleService.pause_sip(db, OWNER_ID, sip.id, on_date=date(2025, 3, 1))
        assert paused.status == "paused"
        assert paused.paused_date == date(2025, 3, 1)

        with pytest.raises(InvalidTransitionError):
            LifecycleService.pause_sip(db, OWNER_ID, sip.id)

        resumed = LifecycleService.resume_sip(db, OWNER_ID, sip.id)
        assert resumed.status == "ongoing"
        assert resumed.paused_date is None

        with pytest.raises(InvalidTransitionError):
            LifecycleService.resume_sip(db, OWNER_ID, sip.id)

    def test_pause_and_resume_write_no_transactions(self, db, sip):
        LifecycleService.pause_sip(db, OWNER_ID, sip.id)
        LifecycleService.resume_sip(db, OWNER_ID, sip.id)
        assert len(_ledger(db, SYSTEMATIC_INVESTMENT, sip.id)) == 1

    def test_paused_sip_accepts_installments(self, db, sip):
        LifecycleService.pause_sip(db, OWNER_ID, sip.id)
        sip = LifecycleService.add_sip_installment(db, OWNER_ID, sip.id, Decimal("500"), Decimal("50"))
        assert sip.status == "paused"
        assert sip.total_units == Decimal("110.0000")

    def test_redeem_freezes_sip(self, db, sip):
        redeemed = LifecycleService.redeem_sip(
            db, OWNER_ID, sip.id, Decimal("5600"), on_date=date(2025, 9, 1)
        )
        assert redeemed.status == "redeemed"
        assert redeemed.redeemed_amount == Decimal("5600.00")
        assert redeemed.redeemed_date == date(2025, 9, 1)

        before = _state(redeemed)
        for action in (
            lambda: LifecycleService.update_sip_nav(db, OWNER_ID, sip.id, Decimal("60")),
            lambda: LifecycleService.add_sip_installment(db, OWNER_ID, sip.id, Decimal("1"), Decimal("1")),
            lambda: LifecycleService.update_sip_units(db, OWNER_ID, sip.id, Decimal("1")),
            lambda: LifecycleService.update_sip(db, OWNER_ID, sip.id, SipUpdate(name="New")),
            lambda: LifecycleService.pause_sip(db, OWNER_ID, sip.id),
            lambda: LifecycleService.redeem_sip(db, OWNER_ID, sip.id, Decimal("1")),
        ):
            with pytest.raises(InvalidTransitionError):
                action()

        db.refresh(redeemed)
        assert _state(redeemed) == before
        assert [e.kind for e in _ledger(db, SYSTEMATIC_INVESTMENT, sip.id)] == ["redeem", "sip"]

    def test_redeem_paused_sip(self, db, sip):
        LifecycleService.pause_sip(db, OWNER_ID, sip.id)
        assert LifecycleService.redeem_sip(db, OWNER_ID, sip.id, Decimal("5000")).status == "redeemed"


class TestCreateHolding:
    def test_create_from_buy_price(self, db, traded_holding):
        assert traded_holding.symbol == "AAPL"
        assert traded_holding.status == "holding"
        assert traded_holding.current_price == Decimal("150.0000")
        assert traded_holding.price_updated_at is not None

        entries = _ledger(db, TRADED_HOLDING, traded_holding.id)
        assert [e.kind for e in entries] == ["buy"]
        assert entries[0].amount == Decimal("1500.00")
        assert entries[0].units == Decimal("10")

    def test_create_from_invested_value(self, db):
        holding = make_holding(db, buy_price=None, invested_value=Decimal("2000"), quantity=Decimal("8"))
        assert holding.buy_price == Decimal("250.0000")
        assert TRADED_HOLDING.derived_fields(holding)["invested_value"] == Decimal("2000.00")

    def test_name_defaults_to_symbol(self, db):
        holding = make_holding(db, name=None, symbol="tsla")
        assert holding.name == "TSLA"

    def test_unknown_market_rejected(self, db):
        from schemas.investment import TradedHoldingCreate

        data = TradedHoldingCreate.model_construct(
            market="forex",
            symbol="EURUSD",
            name=None,
            tile_id=None,
            quantity=Decimal("1"),
            buy_price=Decimal("1"),
            invested_value=None,
            buy_date=date(2025, 1, 1),
            current_price=None,
            notes=None,
        )
        with pytest.raises(ValidationError) as exc_info:
            LifecycleService.create_holding(db, OWNER_ID, data)
        assert exc_info.value.field == "market"


class TestHoldingTransitions:
    def test_price_update_derives_profit(self, db, traded_holding):
        holding = LifecycleService.update_holding_price(db, OWNER_ID, traded_holding.id, Decimal("180"))
        derived = TRADED_HOLDING.derived_fields(holding)
        assert derived["current_value"] == Decimal("1800.00")
        assert derived["profit_loss"] == Decimal("300.00")
        assert derived["profit_loss_percent"] == Decimal("20.0000")

    def test_price_update_is_idempotent(self, db, traded_holding):
        first = LifecycleService.update_holding_price(db, OWNER_ID, traded_holding.id, Decimal("180"))
        state = (first.status, first.quantity, first.current_price)
        second = LifecycleService.update_holding_price(db, OWNER_ID, traded_holding.id, Decimal("180"))

        assert (second.status, second.quantity, second.current_price) == state
        kinds = [e.kind for e in _ledger(db, TRADED_HOLDING, traded_holding.id)]
        assert kinds.count("price_update") == 2

    def test_sell(self, db, traded_holding):
        holding = LifecycleService.sell_holding(
            db, OWNER_ID, traded_holding.id, Decimal("200"), date(2025, 6, 1)
        )
        assert holding.status == "sold"
        assert holding.sell_price == Decimal("200.0000")
        assert holding.current_price == Decimal("200.0000")

        entry = _ledger(db, TRADED_HOLDING, holding.id)[0]
        assert entry.kind == "sell"
        assert entry.amount == Decimal("2000.00")

    def test_sold_holding_rejects_changes(self, db, traded_holding):
        LifecycleService.sell_holding(db, OWNER_ID, traded_holding.id, Decimal("200"), date(2025, 6, 1))
        with pytest.raises(InvalidTransitionError):
            LifecycleService.update_holding_price(db, OWNER_ID, traded_holding.id, Decimal("210"))
        with pytest.raises(InvalidTransitionError):
            LifecycleService.sell_holding(db, OWNER_ID, traded_holding.id, Decimal("210"), date(2025, 7, 1))
        with pytest.raises(InvalidTransitionError):
            LifecycleService.update_holding(
                db, OWNER_ID, traded_holding.id, TradedHoldingUpdate(quantity=Decimal("5"))
            )
        assert len(_ledger(db, TRADED_HOLDING, traded_holding.id)) == 2

    def test_sell_before_buy_rejected(self, db, traded_holding):
        with pytest.raises(ValidationError):
            LifecycleService.sell_holding(db, OWNER_ID, traded_holding.id, Decimal("200"), date(2025, 1, 1))

    def test_update_with_invested_value(self, db, traded_holding):
        holding = LifecycleService.update_holding(
            db,
            OWNER_ID,
            traded_holding.id,
            TradedHoldingUpdate(quantity=Decimal("20"), invested_value=Decimal("3200")),
        )
        assert holding.quantity == Decimal("20")
        assert holding.buy_price == Decimal("160.0000")

    def test_update_can_move_to_main_tile(self, db):
        holding = make_holding(db, tile_id="tile-1")
        holding = LifecycleService.update_holding(
            db, OWNER_ID, holding.id, TradedHoldingUpdate(tile_id=None)
        )
        assert holding.tile_id is None

    def test_other_owner_cannot_sell(self, db, traded_holding):
        with pytest.raises(NotFoundError):
            LifecycleService.sell_holding(
                db, OTHER_OWNER_ID, traded_holding.id, Decimal("200"), date(2025, 6, 1)
            )


class TestAtomicity:
    def test_failed_ledger_write_rolls_back_instrument(self, db, sip):
        error = OperationalError("INSERT INTO sip_transactions", {}, Exception("disk I/O error"))
        with patch.object(HistoryLedgerService, "append_transaction", side_effect=error):
            with pytest.raises(PersistenceError):
                LifecycleService.update_sip_nav(db, OWNER_ID, sip.id, Decimal("75"))

        db.refresh(sip)
        assert sip.current_nav == Decimal("50.0000")
        assert len(_ledger(db, SYSTEMATIC_INVESTMENT, sip.id)) == 1
