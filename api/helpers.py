"""Shared API helpers for route handlers.

Owner resolution, error translation and response builders used across the
instrument routers.
"""

from contextlib import contextmanager

from fastapi import HTTPException

from config import settings
from services.exceptions import (
    InstrumentError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from services.instrument_kinds import InstrumentKind

# Main (untagged) tile of traded holdings in query strings.
MAIN_TILE = "main"


def get_owner_id() -> str:
    """Dependency returning the owner every request acts for."""
    return settings.DEFAULT_OWNER_ID


def http_error(exc: InstrumentError) -> HTTPException:
    """Map a service exception to the matching HTTP error.

    NotFound -> 404, InvalidTransition -> 409, Validation -> 422,
    Persistence -> 503.
    """
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InvalidTransitionError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, PersistenceError):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


@contextmanager
def translate_errors():
    """Re-raise service exceptions as HTTPException."""
    try:
        yield
    except InstrumentError as exc:
        raise http_error(exc) from exc


def instrument_response_dict(kind: InstrumentKind, instrument) -> dict:
    """Build a response dict: stored columns plus freshly derived fields."""
    data = {
        column.key: getattr(instrument, column.key)
        for column in kind.model.__table__.columns
    }
    data.update(kind.derived_fields(instrument))
    return data


def tile_filter(tile_id: str | None) -> dict:
    """Holdings filter for a ``tile_id`` query value.

    ``"main"`` selects holdings with no tile; ``None`` applies no filter.
    """
    if tile_id is None:
        return {}
    if tile_id == MAIN_TILE:
        return {"tile_id": None}
    return {"tile_id": tile_id}
