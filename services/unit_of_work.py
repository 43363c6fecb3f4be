"""Atomic commit/rollback scope shared by the write services."""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from services.exceptions import PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session):
    """Commit everything written inside the block, or nothing.

    Any exception rolls the session back. Database errors are re-raised as
    PersistenceError; domain errors propagate unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Write failed, transaction rolled back: %s", exc)
        raise PersistenceError(f"Database write failed: {exc.__class__.__name__}") from exc
    except Exception:
        db.rollback()
        raise
