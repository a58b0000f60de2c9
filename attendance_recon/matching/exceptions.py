"""Exception types raised by the reconciliation engine."""


class ReconciliationError(Exception):
    """Base class for reconciliation failures."""


class InputDataError(ReconciliationError):
    """Raised when roster or attendance data is malformed.

    Fatal to the run. Carries which source, row and field were at fault
    so callers can report more than a generic message.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str,
        row: int | None = None,
        field: str | None = None,
    ):
        self.source = source
        self.row = row
        self.field = field
        location = source
        if row is not None:
            location += f" row {row}"
        if field is not None:
            location += f", field '{field}'"
        super().__init__(f"{location}: {message}")


class ConfigurationError(ReconciliationError):
    """Raised when the service is missing required configuration."""


class AdjudicationValidationError(ReconciliationError):
    """Raised when an oracle response violates the adjudication contract."""
