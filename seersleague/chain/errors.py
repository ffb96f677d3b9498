"""Ledger access errors."""


class LedgerError(Exception):
    """Base exception for ledger access errors."""

    pass


class UpstreamUnavailableError(LedgerError):
    """
    Raised when a mandatory upstream read fails.

    Covers transport errors, timeouts, rate limiting and malformed
    responses. The original exception is chained as ``__cause__`` and also
    kept on ``cause``. Callers may retry with backoff.
    """

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None and str(cause) else ""
        reason = type(cause).__name__ if cause is not None else "unavailable"
        super().__init__(f"Upstream {operation} failed ({reason}){detail}")
