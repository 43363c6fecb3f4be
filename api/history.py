"""History ledger API endpoints, shared by every instrument kind.

``kind`` is one of the instrument kind names (``liquid_account``,
``valued_asset``, ``cover_plan``, ``savings_goal``, ``fixed_deposit``,
``recurring_deposit``, ``sip``, ``traded_holding``).
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.helpers import get_owner_id, translate_errors
from database import get_db
from schemas.history import SnapshotCreate, SnapshotResponse, SnapshotUpdate, TransactionResponse
from services.history_ledger_service import HistoryLedgerService
from services.instrument_kinds import InstrumentKind, get_kind

router = APIRouter(prefix="/api/history", tags=["history"])

# Ledger-specific snapshot columns a request may carry.
EXTRA_SNAPSHOT_FIELDS = ("premium_amount", "amount")


def _entry_response(kind: InstrumentKind, entry):
    if kind.is_snapshot_ledger:
        return SnapshotResponse.model_validate(entry)
    return TransactionResponse.model_validate(entry)


def _extra_fields(kind: InstrumentKind, data) -> dict:
    """Extra columns present on this kind's ledger and set in the request."""
    return {
        name: getattr(data, name)
        for name in EXTRA_SNAPSHOT_FIELDS
        if getattr(data, name) is not None and hasattr(kind.ledger_model, name)
    }


@router.get("/{kind_name}/{instrument_id}", response_model=list[SnapshotResponse | TransactionResponse])
def list_history(
    kind_name: str,
    instrument_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """List an instrument's history.

    Snapshots are returned oldest first, transactions most recent first.
    """
    with translate_errors():
        kind = get_kind(kind_name)
        entries = HistoryLedgerService.list_by_instrument(db, owner_id, kind, instrument_id)
    return [_entry_response(kind, e) for e in entries]


@router.post("/{kind_name}/{instrument_id}", response_model=SnapshotResponse, status_code=201)
def record_snapshot(
    kind_name: str,
    instrument_id: str,
    snapshot: SnapshotCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Record (or overwrite) a dated value without changing the instrument.

    Kinds with a transaction ledger return 409.
    """
    with translate_errors():
        kind = get_kind(kind_name)
        entry = HistoryLedgerService.record_snapshot(
            db,
            owner_id,
            kind,
            instrument_id,
            snapshot.date,
            snapshot.value,
            snapshot.notes,
            **_extra_fields(kind, snapshot),
        )
    return SnapshotResponse.model_validate(entry)


@router.put("/{kind_name}/entries/{entry_id}", response_model=SnapshotResponse)
def update_entry(
    kind_name: str,
    entry_id: str,
    correction: SnapshotUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Correct a snapshot entry. Transaction entries cannot be edited (409)."""
    with translate_errors():
        kind = get_kind(kind_name)
        entry = HistoryLedgerService.update_entry(
            db,
            owner_id,
            kind,
            entry_id,
            value=correction.value,
            notes=correction.notes,
            on_date=correction.date,
            **_extra_fields(kind, correction),
        )
    return SnapshotResponse.model_validate(entry)


@router.delete("/{kind_name}/entries/{entry_id}", status_code=204)
def delete_entry(
    kind_name: str,
    entry_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Delete one history entry; the instrument itself is unchanged."""
    with translate_errors():
        kind = get_kind(kind_name)
        HistoryLedgerService.delete_entry(db, owner_id, kind, entry_id)
    return Response(status_code=204)
