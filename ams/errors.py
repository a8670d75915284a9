"""Failure values returned by the versioning and migration core.

Core operations return either their result or a ``Failure``; they do not
raise for expected outcomes such as a regressive version or a missing
migration path. Infrastructure faults still raise ``ams.db.errors``.
"""

from enum import Enum
from typing import Any, TypeGuard

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Stable failure kinds. Each maps to one HTTP status at the API edge."""

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


class Failure(BaseModel):
    """A structured, expected failure of a core operation."""

    kind: ErrorKind
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def of(cls, kind: ErrorKind, message: str, **details: Any) -> "Failure":
        return cls(kind=kind, message=message, details=details)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


def is_failure(value: object) -> TypeGuard[Failure]:
    """Narrow a ``T | Failure`` result to its failure branch."""
    return isinstance(value, Failure)
