"""Read-only rollups across an owner's instruments.

Per-class summaries count only live instruments (ongoing deposits, active
goals, unsold holdings, ...) and total what was put in against what it is
worth now. Values are derived on the fly from stored base fields; nothing
here writes.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from services import valuation_engine as ve
from services.instrument_kinds import COVER_PLAN, KINDS, TRADED_HOLDING, VALUED_ASSET, InstrumentKind
from services.instrument_store import InstrumentStore

logger = logging.getLogger(__name__)


@dataclass
class ClassSummary:
    """Totals for one instrument class."""

    kind: str
    active_count: int
    total_invested: Decimal
    total_value: Decimal


@dataclass
class Overview:
    """Owner-wide totals. Cover plans are reported separately from net worth."""

    net_worth: Decimal
    by_kind: dict[str, ClassSummary]
    assets_by_category: dict[str, Decimal]
    total_cover: Decimal


class SummaryService:
    """Aggregates instrument values for one owner."""

    @staticmethod
    def summarize(db: Session, owner_id: str, kind: InstrumentKind, **filters) -> ClassSummary:
        """Summarize one class over its live instruments.

        ``filters`` narrow the rows the same way ``InstrumentStore.list_all``
        does, e.g. ``market="us", tile_id=None`` for one holdings tile.
        """
        instruments = [
            inst
            for inst in InstrumentStore.list_all(db, owner_id, kind, **filters)
            if kind.is_live(inst)
        ]
        total_invested = sum((ve.to_decimal(kind.invested(i)) for i in instruments), ve.ZERO)
        total_value = sum((ve.to_decimal(kind.value(i)) for i in instruments), ve.ZERO)
        return ClassSummary(
            kind=kind.name,
            active_count=len(instruments),
            total_invested=ve.money(total_invested),
            total_value=ve.money(total_value),
        )

    @staticmethod
    def holdings_by_market(db: Session, owner_id: str) -> dict[str, ClassSummary]:
        """Holding summaries keyed by market, across all tiles."""
        markets = sorted(
            {h.market for h in InstrumentStore.list_all(db, owner_id, TRADED_HOLDING)}
        )
        return {
            market: SummaryService.summarize(db, owner_id, TRADED_HOLDING, market=market)
            for market in markets
        }

    @staticmethod
    def overview(db: Session, owner_id: str) -> Overview:
        """Net worth across every class except cover plans.

        Cover is insurance, not owned wealth, so its total is reported
        alongside but never added in.
        """
        by_kind = {name: SummaryService.summarize(db, owner_id, kind) for name, kind in KINDS.items()}
        net_worth = sum(
            (summary.total_value for name, summary in by_kind.items() if name != COVER_PLAN.name),
            ve.ZERO,
        )

        assets_by_category: dict[str, Decimal] = {}
        for asset in InstrumentStore.list_all(db, owner_id, VALUED_ASSET):
            assets_by_category[asset.category] = ve.money(
                assets_by_category.get(asset.category, ve.ZERO) + asset.value
            )

        logger.debug("Computed overview for owner %s: net worth %s", owner_id, net_worth)
        return Overview(
            net_worth=ve.money(net_worth),
            by_kind=by_kind,
            assets_by_category=assets_by_category,
            total_cover=by_kind[COVER_PLAN.name].total_value,
        )
