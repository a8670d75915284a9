"""Idempotency guard for write requests."""

from ams.idempotency.guard import IdempotencyGuard, fingerprint
from ams.idempotency.models import DedupRecord, IdempotencyCheckResult, IdempotencyStatus
from ams.idempotency.store import DedupStore

__all__ = [
    "DedupRecord",
    "DedupStore",
    "IdempotencyCheckResult",
    "IdempotencyGuard",
    "IdempotencyStatus",
    "fingerprint",
]
