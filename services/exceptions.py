"""Typed exception hierarchy for instrument operations.

Services raise these; the API layer translates them into HTTP responses.
Nothing here is retried internally.
"""


class InstrumentError(Exception):
    """Base exception for all instrument-related errors.

    Carries the instrument kind so callers can tell which class failed.
    """

    def __init__(self, message: str, kind: str = ""):
        self.kind = kind
        super().__init__(message)


class NotFoundError(InstrumentError):
    """(owner, id) does not resolve to an instrument or ledger entry."""

    pass


class InvalidTransitionError(InstrumentError):
    """The requested lifecycle action is not legal from the current status."""

    def __init__(self, message: str, kind: str = "", status: str | None = None, action: str = ""):
        self.status = status
        self.action = action
        super().__init__(message, kind)


class ValidationError(InstrumentError):
    """Missing or out-of-range input (non-positive principal, bad date range, ...)."""

    def __init__(self, message: str, kind: str = "", field: str | None = None):
        self.field = field
        super().__init__(message, kind)


class PersistenceError(InstrumentError):
    """The underlying store was unavailable or a write failed.

    The enclosing transaction has already been rolled back when this is raised.
    """

    pass
