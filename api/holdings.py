"""Market-traded holding API endpoints.

Holdings are grouped by market and, within a market, by an optional tile
tag. Pass ``tile_id=main`` to select untagged holdings.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from api.helpers import get_owner_id, instrument_response_dict, tile_filter, translate_errors
from database import get_db
from schemas.investment import (
    Market,
    PriceUpdate,
    TradedHoldingCreate,
    TradedHoldingResponse,
    TradedHoldingSell,
    TradedHoldingUpdate,
)
from services.instrument_kinds import TRADED_HOLDING
from services.instrument_store import InstrumentStore
from services.lifecycle_service import LifecycleService

router = APIRouter(prefix="/api/holdings", tags=["holdings"])


@router.get("", response_model=list[TradedHoldingResponse])
def list_holdings(
    market: Market | None = None,
    tile_id: str | None = Query(default=None),
    status: str | None = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """List holdings, optionally for one market and tile."""
    filters = tile_filter(tile_id)
    if market is not None:
        filters["market"] = market.value
    with translate_errors():
        holdings = InstrumentStore.list_all(db, owner_id, TRADED_HOLDING, status=status, **filters)
    return [instrument_response_dict(TRADED_HOLDING, h) for h in holdings]


@router.post("", response_model=TradedHoldingResponse, status_code=201)
def create_holding(
    holding_data: TradedHoldingCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        holding = LifecycleService.create_holding(db, owner_id, holding_data)
    return instrument_response_dict(TRADED_HOLDING, holding)


@router.get("/{holding_id}", response_model=TradedHoldingResponse)
def get_holding(holding_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        holding = InstrumentStore.get(db, owner_id, TRADED_HOLDING, holding_id)
    return instrument_response_dict(TRADED_HOLDING, holding)


@router.put("/{holding_id}", response_model=TradedHoldingResponse)
def update_holding(
    holding_id: str,
    holding_data: TradedHoldingUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        holding = LifecycleService.update_holding(db, owner_id, holding_id, holding_data)
    return instrument_response_dict(TRADED_HOLDING, holding)


@router.put("/{holding_id}/price", response_model=TradedHoldingResponse)
def update_price(
    holding_id: str,
    price_data: PriceUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        holding = LifecycleService.update_holding_price(db, owner_id, holding_id, price_data.current_price)
    return instrument_response_dict(TRADED_HOLDING, holding)


@router.post("/{holding_id}/sell", response_model=TradedHoldingResponse)
def sell_holding(
    holding_id: str,
    sell_data: TradedHoldingSell,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        holding = LifecycleService.sell_holding(
            db, owner_id, holding_id, sell_data.sell_price, sell_data.sell_date, sell_data.notes
        )
    return instrument_response_dict(TRADED_HOLDING, holding)


@router.delete("/{holding_id}", status_code=204)
def delete_holding(holding_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        LifecycleService.delete(db, owner_id, TRADED_HOLDING, holding_id)
    return Response(status_code=204)
