"""Owner-scoped persistence for instrument records.

Pure data layer: create/get/list/update/delete for any ``InstrumentKind``.
Writes only ``flush()``; committing is the caller's job. Deleting an
instrument removes its ledger rows through the ORM cascade.
"""

import logging

from sqlalchemy.orm import Session

from services.exceptions import NotFoundError, ValidationError
from services.instrument_kinds import InstrumentKind

logger = logging.getLogger(__name__)

# Columns callers may never set directly.
_PROTECTED_COLUMNS = {"id", "owner_id", "created_at", "updated_at"}


def _writable_columns(kind: InstrumentKind) -> set[str]:
    return set(kind.model.__table__.columns.keys()) - _PROTECTED_COLUMNS


def _check_fields(kind: InstrumentKind, fields: dict) -> None:
    unknown = set(fields) - _writable_columns(kind)
    if unknown:
        raise ValidationError(
            f"Unknown {kind.label.lower()} field(s): {', '.join(sorted(unknown))}",
            kind=kind.name,
        )


class InstrumentStore:
    """CRUD over instrument rows, always filtered by owner."""

    @staticmethod
    def create(db: Session, owner_id: str, kind: InstrumentKind, **fields):
        """Insert a new instrument for ``owner_id``.

        The kind's initial status is applied when no status is given.
        """
        _check_fields(kind, fields)
        if kind.initial_status and not fields.get("status"):
            fields["status"] = kind.initial_status

        instrument = kind.model(owner_id=owner_id, **fields)
        db.add(instrument)
        db.flush()
        logger.debug("Created %s %s for owner %s", kind.name, instrument.id, owner_id)
        return instrument

    @staticmethod
    def get(
        db: Session,
        owner_id: str,
        kind: InstrumentKind,
        instrument_id: str,
        for_update: bool = False,
    ):
        """Fetch one instrument by (owner, id).

        ``for_update`` takes a row lock on databases that support it, so
        concurrent transitions on the same instrument serialize.

        Raises:
            NotFoundError: (owner, id) does not resolve
        """
        query = db.query(kind.model).filter(
            kind.model.id == instrument_id,
            kind.model.owner_id == owner_id,
        )
        if for_update:
            query = query.with_for_update()
        instrument = query.first()
        if instrument is None:
            raise NotFoundError(f"{kind.label} not found", kind=kind.name)
        return instrument

    @staticmethod
    def list_all(
        db: Session,
        owner_id: str,
        kind: InstrumentKind,
        status: str | None = None,
        **filters,
    ) -> list:
        """List an owner's instruments of one kind.

        ``filters`` may name any of the kind's ``filter_fields``; a ``None``
        value matches NULL (e.g. ``tile_id=None`` is the main portfolio).
        """
        unknown = set(filters) - set(kind.filter_fields)
        if unknown:
            raise ValidationError(
                f"Cannot filter {kind.label.lower()}s by: {', '.join(sorted(unknown))}",
                kind=kind.name,
            )

        query = db.query(kind.model).filter(kind.model.owner_id == owner_id)
        if status is not None:
            if status not in kind.statuses:
                raise ValidationError(
                    f"Unknown {kind.label.lower()} status: {status!r}",
                    kind=kind.name,
                    field="status",
                )
            query = query.filter(kind.model.status == status)
        for name, value in filters.items():
            column = getattr(kind.model, name)
            query = query.filter(column.is_(None) if value is None else column == value)

        return query.order_by(*kind.order_by(kind.model)).all()

    @staticmethod
    def apply(db: Session, kind: InstrumentKind, instrument, **fields):
        """Write ``fields`` onto an already-loaded instrument."""
        _check_fields(kind, fields)
        for name, value in fields.items():
            setattr(instrument, name, value)
        db.flush()
        return instrument

    @staticmethod
    def update(db: Session, owner_id: str, kind: InstrumentKind, instrument_id: str, **fields):
        """Load by (owner, id) and write ``fields``.

        Raises:
            NotFoundError: (owner, id) does not resolve
        """
        instrument = InstrumentStore.get(db, owner_id, kind, instrument_id)
        return InstrumentStore.apply(db, kind, instrument, **fields)

    @staticmethod
    def delete(db: Session, owner_id: str, kind: InstrumentKind, instrument_id: str) -> None:
        """Delete an instrument and, by cascade, its ledger rows.

        Raises:
            NotFoundError: (owner, id) does not resolve
        """
        instrument = InstrumentStore.get(db, owner_id, kind, instrument_id)
        logger.info("Deleting %s %s (%s)", kind.name, instrument_id, instrument.name)
        db.delete(instrument)
        db.flush()
