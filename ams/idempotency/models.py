"""Idempotency models and enums."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from ams.errors import ErrorKind, Failure


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class IdempotencyStatus(str, Enum):
    """Outcome of an idempotency check."""

    PROCEED = "proceed"
    DUPLICATE = "duplicate"
    CONFLICT = "conflict"


class DedupRecord(BaseModel):
    """First use of an idempotency key. Never updated after creation."""

    idempotency_key: str
    fingerprint: str
    created_at: datetime = Field(default_factory=utc_now)


class IdempotencyCheckResult(BaseModel):
    """Result of an idempotency check."""

    status: IdempotencyStatus = Field(description="Whether the request may proceed")
    key: str | None = Field(default=None, description="Idempotency key, if supplied")
    fingerprint: str | None = Field(default=None, description="SHA-256 of the payload")

    @property
    def proceed(self) -> bool:
        return self.status == IdempotencyStatus.PROCEED

    def failure(self) -> Failure | None:
        """The Failure to surface for a rejected request, or None to proceed."""
        if self.status == IdempotencyStatus.DUPLICATE:
            return Failure.of(ErrorKind.IDEMPOTENCY_DUPLICATE, "Duplicate request", key=self.key)
        if self.status == IdempotencyStatus.CONFLICT:
            return Failure.of(
                ErrorKind.IDEMPOTENCY_CONFLICT,
                "Idempotency key re-used with different payload",
                key=self.key,
            )
        return None
