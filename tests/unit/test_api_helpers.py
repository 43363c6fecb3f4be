"""Tests for shared API helpers."""

from decimal import Decimal

import pytest
from fastapi import HTTPException

from api.helpers import get_owner_id, http_error, instrument_response_dict, tile_filter, translate_errors
from config import settings
from services.exceptions import (
    InstrumentError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from services.instrument_kinds import FIXED_DEPOSIT, LIQUID_ACCOUNT


class TestHttpError:
    """Tests for http_error."""

    @pytest.mark.parametrize(
        "exc, status_code",
        [
            (NotFoundError("Fixed deposit not found"), 404),
            (InvalidTransitionError("Cannot close"), 409),
            (ValidationError("principal must be positive"), 422),
            (PersistenceError("Database write failed"), 503),
            (InstrumentError("Something else"), 400),
        ],
    )
    def test_status_codes(self, exc, status_code):
        error = http_error(exc)
        assert error.status_code == status_code
        assert error.detail == str(exc)


class TestTranslateErrors:
    """Tests for translate_errors."""

    def test_translates_service_error(self):
        with pytest.raises(HTTPException) as exc_info:
            with translate_errors():
                raise NotFoundError("Account not found", kind="liquid_account")
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Account not found"

    def test_other_errors_propagate(self):
        with pytest.raises(KeyError):
            with translate_errors():
                raise KeyError("boom")

    def test_no_error(self):
        with translate_errors():
            value = 1
        assert value == 1


class TestInstrumentResponseDict:
    """Tests for instrument_response_dict."""

    def test_columns_only_for_plain_kind(self, db, liquid_account):
        data = instrument_response_dict(LIQUID_ACCOUNT, liquid_account)
        assert data["id"] == liquid_account.id
        assert data["balance"] == Decimal("2500.00")
        assert data["owner_id"] == liquid_account.owner_id

    def test_includes_derived_fields(self, db, fixed_deposit):
        data = instrument_response_dict(FIXED_DEPOSIT, fixed_deposit)
        assert data["principal"] == Decimal("100000.00")
        assert data["expected_payout"] == Decimal("107000.00")
        assert data["effective_rate"] == fixed_deposit.stated_rate


class TestTileFilter:
    """Tests for tile_filter."""

    def test_no_tile_means_no_filter(self):
        assert tile_filter(None) == {}

    def test_main_tile(self):
        assert tile_filter("main") == {"tile_id": None}

    def test_named_tile(self):
        assert tile_filter("tile-1") == {"tile_id": "tile-1"}


def test_owner_id_comes_from_settings():
    assert get_owner_id() == settings.DEFAULT_OWNER_ID
