"""Error response models for consistent API error handling."""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes for API responses.

    The domain failure kinds are carried through unchanged; the remaining
    codes cover request-level problems.
    """

    DUPLICATE_VERSION = "DUPLICATE_VERSION"
    REGRESSIVE_VERSION = "REGRESSIVE_VERSION"
    AMBIGUOUS_SELECTOR = "AMBIGUOUS_SELECTOR"
    NOT_FOUND = "NOT_FOUND"
    CIRCULAR_PATH = "CIRCULAR_PATH"
    NO_PATH = "NO_PATH"
    INVALID_PATCH = "INVALID_PATCH"
    IDEMPOTENCY_DUPLICATE = "IDEMPOTENCY_DUPLICATE"
    IDEMPOTENCY_CONFLICT = "IDEMPOTENCY_CONFLICT"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, etc.)."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """No caller identity was supplied."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """The service is missing configuration this request needs."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for request validation failures."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""

    details: list[ErrorDetail] | dict[str, Any] | None = None
    """Field errors for invalid requests, or the failure's context."""


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "REGRESSIVE_VERSION",
                "message": "Version 1.2.0 is lower than latest 1.3.0"
            }
        }
    """

    error: ErrorBody
