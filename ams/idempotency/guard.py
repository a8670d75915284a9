"""Idempotency guard for retried write requests.

A request carrying an idempotency key is fingerprinted and the pair is
recorded on first use. A retry with the same payload is a duplicate; the
same key with a different payload is a conflict. Requests without a key
always proceed.
"""

import hashlib
import json
from typing import Any

from ams.idempotency.models import IdempotencyCheckResult, IdempotencyStatus
from ams.idempotency.store import DedupStore
from ams.observability.logging import get_logger
from ams.observability.metrics import IDEMPOTENCY_REJECTIONS

logger = get_logger(__name__)


def fingerprint(payload: Any) -> str:
    """SHA-256 hex of a payload.

    Strings and bytes are hashed as given; anything else is hashed as
    canonical JSON (sorted keys, compact separators).
    """
    if isinstance(payload, bytes):
        data = payload
    elif isinstance(payload, str):
        data = payload.encode("utf-8")
    else:
        data = json.dumps(
            payload,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            default=str,
        ).encode("utf-8")
    return hashlib.sha256(data).hexdigest()


class IdempotencyGuard:
    """Deduplicates requests by idempotency key and payload fingerprint."""

    def __init__(self, store: DedupStore) -> None:
        self._store = store

    async def check(self, key: str | None, payload: Any) -> IdempotencyCheckResult:
        if not key:
            return IdempotencyCheckResult(status=IdempotencyStatus.PROCEED)

        digest = fingerprint(payload)
        record, inserted = await self._store.insert_if_absent(key, digest)

        if inserted:
            logger.debug("idempotency_key_recorded", key=key)
            return IdempotencyCheckResult(
                status=IdempotencyStatus.PROCEED, key=key, fingerprint=digest
            )

        status = (
            IdempotencyStatus.DUPLICATE
            if record.fingerprint == digest
            else IdempotencyStatus.CONFLICT
        )
        IDEMPOTENCY_REJECTIONS.labels(reason=status.value).inc()
        logger.info("idempotency_request_rejected", key=key, status=status.value)
        return IdempotencyCheckResult(status=status, key=key, fingerprint=digest)
