"""Domain errors raised by the balance history services.

Routers translate these into HTTP responses; services never raise
HTTPException themselves.
"""


class BalanceHistoryError(Exception):
    """Base class for balance history errors."""


class InvalidRangeError(BalanceHistoryError):
    """Malformed timestamp/date, or a start that lies after the end."""


class InvalidIntervalError(BalanceHistoryError):
    """Unrecognized chart interval."""


class LedgerUnavailableError(BalanceHistoryError):
    """The ledger record store could not be reached or timed out.

    Transient from the caller's point of view; nothing here retries.
    """
