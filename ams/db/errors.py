"""Store error hierarchy.

Every store backend wraps driver-specific exceptions in one of these so
callers can tell a constraint violation from an outage.
"""


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when the backing store is unreachable or a query times out."""

    pass


class NotFoundError(StoreError):
    """Raised when a specific entity lookup that must succeed does not."""

    pass


class ConflictError(StoreError):
    """Raised on unique constraint violation (insert-if-absent lost the race)."""

    pass
