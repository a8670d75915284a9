"""API exception hierarchy for consistent error handling.

All API exceptions inherit from AMSAPIError, which provides status_code and
error_code attributes used by the global exception handler. Core failures
are converted at the route boundary with ``raise_for_failure``.
"""

from typing import Any, TypeVar

from ams.api.models.errors import ErrorCode
from ams.errors import ErrorKind, Failure, is_failure

T = TypeVar("T")

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.DUPLICATE_VERSION: 409,
    ErrorKind.IDEMPOTENCY_DUPLICATE: 409,
    ErrorKind.IDEMPOTENCY_CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.AMBIGUOUS_SELECTOR: 400,
    ErrorKind.CIRCULAR_PATH: 400,
    ErrorKind.NO_PATH: 400,
    ErrorKind.REGRESSIVE_VERSION: 422,
    ErrorKind.INVALID_PATCH: 422,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UPSTREAM_ERROR: 502,
}


class AMSAPIError(Exception):
    """Base exception for all API errors.

    Subclasses set status_code and error_code to define the HTTP response.
    """

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class InvalidRequestError(AMSAPIError):
    """Raised when the request body cannot be read."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class MissingUserContextError(AMSAPIError):
    """Raised when the caller identity header is absent."""

    status_code = 401
    error_code = ErrorCode.UNAUTHORIZED


class ServiceMisconfiguredError(AMSAPIError):
    """Raised when required configuration (e.g. billing proxy URL) is missing."""

    status_code = 500
    error_code = ErrorCode.CONFIGURATION_ERROR


class FailureError(AMSAPIError):
    """A core Failure surfaced over HTTP with its kind's status."""

    def __init__(self, failure: Failure) -> None:
        super().__init__(failure.message, details=failure.details or None)
        self.failure = failure
        self.error_code = ErrorCode(failure.kind.value)
        self.status_code = status_for(failure)


def status_for(failure: Failure) -> int:
    """HTTP status for a failure; upstream timeouts are 504."""
    if failure.kind == ErrorKind.UPSTREAM_ERROR and failure.details.get("timed_out"):
        return 504
    return STATUS_BY_KIND.get(failure.kind, 500)


def raise_for_failure(result: T | Failure) -> T:
    """Return ``result`` unchanged, or raise FailureError if it is a Failure."""
    if is_failure(result):
        raise FailureError(result)
    return result
