"""Service for instrument history ledgers.

Two write policies, chosen by the instrument kind:

- ``upsert_snapshot``: one row per (instrument, date); writing the same date
  again overwrites it.
- ``append_transaction``: always inserts; rows are discrete events.

The low-level writers only ``flush()`` so the lifecycle service can pair them
with an instrument write in one transaction. The correction entry points
(``record_snapshot``, ``update_entry``, ``delete_entry``) commit on their
own. Corrections never touch the instrument's current fields.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import asc, desc
from sqlalchemy.orm import Session

from services.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from services.instrument_kinds import InstrumentKind
from services.instrument_store import InstrumentStore
from services.unit_of_work import atomic

logger = logging.getLogger(__name__)

# Snapshot ledger columns that must be supplied along with the value.
REQUIRED_SNAPSHOT_EXTRAS = ("premium_amount", "amount")


def _require_snapshot_ledger(kind: InstrumentKind) -> None:
    if not kind.is_snapshot_ledger:
        raise InvalidTransitionError(
            f"{kind.label} history is an append-only transaction ledger",
            kind=kind.name,
        )


def _require_transaction_ledger(kind: InstrumentKind) -> None:
    if kind.is_snapshot_ledger:
        raise InvalidTransitionError(
            f"{kind.label} history is a dated snapshot ledger",
            kind=kind.name,
        )


class HistoryLedgerService:
    """Reads and writes the per-instrument history ledgers."""

    # --- Writers (flush only) ---

    @staticmethod
    def find_snapshot(db: Session, kind: InstrumentKind, instrument_id: str, on_date: date):
        """Return the snapshot for (instrument, date), or None."""
        _require_snapshot_ledger(kind)
        ledger = kind.ledger_model
        return (
            db.query(ledger)
            .filter(ledger.instrument_id == instrument_id, ledger.date == on_date)
            .first()
        )

    @staticmethod
    def upsert_snapshot(
        db: Session,
        kind: InstrumentKind,
        instrument_id: str,
        on_date: date,
        value: Decimal,
        notes: str | None = None,
        **extra,
    ):
        """Write the value of an instrument as of ``on_date``.

        An existing row for the same date is overwritten in place; ``extra``
        carries ledger-specific columns (premium amount, contribution).
        """
        entry = HistoryLedgerService.find_snapshot(db, kind, instrument_id, on_date)
        if entry is None:
            entry = kind.ledger_model(
                instrument_id=instrument_id,
                date=on_date,
                value=value,
                notes=notes,
                **extra,
            )
            db.add(entry)
        else:
            entry.value = value
            entry.notes = notes
            for name, extra_value in extra.items():
                setattr(entry, name, extra_value)
        db.flush()
        return entry

    @staticmethod
    def append_transaction(
        db: Session,
        kind: InstrumentKind,
        instrument_id: str,
        on_date: date,
        tx_kind: str,
        amount: Decimal | None = None,
        price: Decimal | None = None,
        units: Decimal | None = None,
        notes: str | None = None,
    ):
        """Insert one transaction row; same-date duplicates are kept."""
        _require_transaction_ledger(kind)
        entry = kind.ledger_model(
            instrument_id=instrument_id,
            date=on_date,
            kind=tx_kind,
            amount=amount,
            price=price,
            units=units,
            notes=notes,
        )
        db.add(entry)
        db.flush()
        return entry

    # --- Queries ---

    @staticmethod
    def list_by_instrument(db: Session, owner_id: str, kind: InstrumentKind, instrument_id: str) -> list:
        """List an instrument's ledger.

        Snapshots come oldest first; transactions come most recent first
        (date, then insertion order).

        Raises:
            NotFoundError: (owner, id) does not resolve
        """
        InstrumentStore.get(db, owner_id, kind, instrument_id)
        ledger = kind.ledger_model
        query = db.query(ledger).filter(ledger.instrument_id == instrument_id)
        if kind.is_snapshot_ledger:
            return query.order_by(asc(ledger.date)).all()
        return query.order_by(desc(ledger.date), desc(ledger.created_at), desc(ledger.id)).all()

    @staticmethod
    def get_entry(db: Session, owner_id: str, kind: InstrumentKind, entry_id: str):
        """Fetch one ledger row whose instrument belongs to ``owner_id``.

        Raises:
            NotFoundError: entry missing or owned by someone else
        """
        ledger = kind.ledger_model
        entry = (
            db.query(ledger)
            .join(kind.model, ledger.instrument_id == kind.model.id)
            .filter(ledger.id == entry_id, kind.model.owner_id == owner_id)
            .first()
        )
        if entry is None:
            raise NotFoundError("History entry not found", kind=kind.name)
        return entry

    # --- Corrections (commit) ---

    @staticmethod
    def record_snapshot(
        db: Session,
        owner_id: str,
        kind: InstrumentKind,
        instrument_id: str,
        on_date: date,
        value: Decimal,
        notes: str | None = None,
        **extra,
    ):
        """Record or overwrite a snapshot for an arbitrary date.

        Raises:
            InvalidTransitionError: ``kind`` keeps a transaction ledger
            ValidationError: a ledger column the kind requires was not given
            NotFoundError: (owner, id) does not resolve
        """
        _require_snapshot_ledger(kind)
        for name in REQUIRED_SNAPSHOT_EXTRAS:
            if hasattr(kind.ledger_model, name) and extra.get(name) is None:
                raise ValidationError(
                    f"{name} is required for {kind.label.lower()} history",
                    kind=kind.name,
                    field=name,
                )
        with atomic(db):
            InstrumentStore.get(db, owner_id, kind, instrument_id)
            entry = HistoryLedgerService.upsert_snapshot(
                db, kind, instrument_id, on_date, value, notes, **extra
            )
        db.refresh(entry)
        logger.info("Recorded %s snapshot for %s on %s", kind.name, instrument_id, on_date)
        return entry

    @staticmethod
    def update_entry(
        db: Session,
        owner_id: str,
        kind: InstrumentKind,
        entry_id: str,
        value: Decimal | None = None,
        notes: str | None = None,
        on_date: date | None = None,
        **extra,
    ):
        """Correct a snapshot's value, notes, date or extra columns.

        Transaction rows are immutable and cannot be edited.

        Raises:
            NotFoundError: entry missing or not owned
            InvalidTransitionError: ``kind`` keeps a transaction ledger
            ValidationError: another snapshot already holds ``on_date``
        """
        _require_snapshot_ledger(kind)
        with atomic(db):
            entry = HistoryLedgerService.get_entry(db, owner_id, kind, entry_id)
            if on_date is not None and on_date != entry.date:
                clash = HistoryLedgerService.find_snapshot(db, kind, entry.instrument_id, on_date)
                if clash is not None:
                    raise ValidationError(
                        f"A history entry already exists for {on_date.isoformat()}",
                        kind=kind.name,
                        field="date",
                    )
                entry.date = on_date
            if value is not None:
                entry.value = value
            if notes is not None:
                entry.notes = notes
            for name, extra_value in extra.items():
                if extra_value is not None:
                    setattr(entry, name, extra_value)
            db.flush()
        db.refresh(entry)
        logger.info("Corrected %s history entry %s", kind.name, entry_id)
        return entry

    @staticmethod
    def delete_entry(db: Session, owner_id: str, kind: InstrumentKind, entry_id: str) -> None:
        """Delete one ledger row; the instrument's current value is untouched.

        Raises:
            NotFoundError: entry missing or not owned
        """
        with atomic(db):
            entry = HistoryLedgerService.get_entry(db, owner_id, kind, entry_id)
            db.delete(entry)
            db.flush()
        logger.info("Deleted %s history entry %s", kind.name, entry_id)
