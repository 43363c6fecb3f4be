"""Summary and net-worth API endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.helpers import get_owner_id, tile_filter, translate_errors
from database import get_db
from schemas.investment import Market
from schemas.summary import ClassSummaryResponse, OverviewResponse
from services.instrument_kinds import TRADED_HOLDING, get_kind
from services.summary_service import SummaryService

router = APIRouter(prefix="/api/summary", tags=["summary"])


@router.get("/overview", response_model=OverviewResponse)
def get_overview(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """Net worth across all classes; cover plans are listed but not counted."""
    return asdict(SummaryService.overview(db, owner_id))


@router.get("/holdings/by-market", response_model=dict[str, ClassSummaryResponse])
def get_holdings_by_market(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    summaries = SummaryService.holdings_by_market(db, owner_id)
    return {market: asdict(summary) for market, summary in summaries.items()}


@router.get("/{kind_name}", response_model=ClassSummaryResponse)
def get_class_summary(
    kind_name: str,
    market: Market | None = None,
    tile_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Totals for one instrument class over its live instruments.

    ``market`` and ``tile_id`` (``main`` for untagged) narrow holding summaries.
    """
    with translate_errors():
        kind = get_kind(kind_name)
        filters = {}
        if kind is TRADED_HOLDING:
            filters = tile_filter(tile_id)
            if market is not None:
                filters["market"] = market.value
        summary = SummaryService.summarize(db, owner_id, kind, **filters)
    return asdict(summary)
