"""Unit tests for the idempotency guard."""

import asyncio

import pytest

from ams.errors import ErrorKind
from ams.idempotency.guard import IdempotencyGuard, fingerprint
from ams.idempotency.models import IdempotencyStatus
from ams.idempotency.stores.inmemory import InMemoryDedupStore


@pytest.fixture
def guard() -> IdempotencyGuard:
    return IdempotencyGuard(InMemoryDedupStore())


class TestFingerprint:
    def test_key_order_irrelevant(self) -> None:
        assert fingerprint({"a": 1, "b": [1, 2]}) == fingerprint({"b": [1, 2], "a": 1})

    def test_different_payloads_differ(self) -> None:
        assert fingerprint({"a": 1}) != fingerprint({"a": 2})

    def test_str_and_bytes_hash_raw(self) -> None:
        assert fingerprint("body") == fingerprint(b"body")


class TestIdempotencyGuard:
    """Tests for IdempotencyGuard.check."""

    @pytest.mark.asyncio
    async def test_no_key_always_proceeds(self, guard) -> None:
        first = await guard.check(None, {"a": 1})
        second = await guard.check(None, {"a": 1})

        assert first.proceed and second.proceed
        assert first.failure() is None

    @pytest.mark.asyncio
    async def test_first_use_proceeds(self, guard) -> None:
        result = await guard.check("key-1", {"a": 1})

        assert result.status == IdempotencyStatus.PROCEED
        assert result.fingerprint == fingerprint({"a": 1})

    @pytest.mark.asyncio
    async def test_same_payload_is_duplicate(self, guard) -> None:
        await guard.check("key-1", {"a": 1})

        result = await guard.check("key-1", {"a": 1})

        assert result.status == IdempotencyStatus.DUPLICATE
        assert result.failure().kind == ErrorKind.IDEMPOTENCY_DUPLICATE

    @pytest.mark.asyncio
    async def test_different_payload_is_conflict(self, guard) -> None:
        await guard.check("key-1", {"a": 1})

        result = await guard.check("key-1", {"a": 2})

        assert result.status == IdempotencyStatus.CONFLICT
        assert result.failure().kind == ErrorKind.IDEMPOTENCY_CONFLICT

    @pytest.mark.asyncio
    async def test_keys_independent(self, guard) -> None:
        await guard.check("key-1", {"a": 1})

        result = await guard.check("key-2", {"a": 1})

        assert result.proceed

    @pytest.mark.asyncio
    async def test_concurrent_first_use_single_winner(self, guard) -> None:
        results = await asyncio.gather(*(guard.check("race", {"n": 1}) for _ in range(10)))

        statuses = [r.status for r in results]
        assert statuses.count(IdempotencyStatus.PROCEED) == 1
        assert statuses.count(IdempotencyStatus.DUPLICATE) == 9
