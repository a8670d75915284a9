"""Unit tests for the upgrade queues."""

import pytest

from ams.jobs.queue import InMemoryUpgradeQueue, PgmqUpgradeQueue, UpgradeJob


def _job(agent_id: str = "agent-1") -> UpgradeJob:
    return UpgradeJob(
        agent_id=agent_id,
        user_id="user-1",
        from_version="1.0.0",
        to_version="1.1.0",
        config={"model": "m"},
    )


class TestInMemoryUpgradeQueue:
    """Tests for InMemoryUpgradeQueue."""

    @pytest.mark.asyncio
    async def test_enqueue_read_ack(self) -> None:
        queue = InMemoryUpgradeQueue()
        job_id = await queue.enqueue(_job())

        [queued] = await queue.read()
        await queue.ack(job_id)

        assert queued.job_id == job_id
        assert queued.read_count == 1
        assert queued.job.config == {"model": "m"}
        assert await queue.read() == []

    @pytest.mark.asyncio
    async def test_read_hides_jobs(self) -> None:
        queue = InMemoryUpgradeQueue()
        await queue.enqueue(_job("a"))
        await queue.enqueue(_job("b"))

        first = await queue.read(limit=1)
        second = await queue.read()

        assert [q.job.agent_id for q in first] == ["a"]
        assert [q.job.agent_id for q in second] == ["b"]

    @pytest.mark.asyncio
    async def test_requeue_stalled_dead_letters_unacked(self) -> None:
        queue = InMemoryUpgradeQueue()
        await queue.enqueue(_job("a"))
        await queue.enqueue(_job("b"))
        [first, second] = await queue.read()
        await queue.ack(first.job_id)

        moved = await queue.requeue_stalled()

        assert moved == 1
        assert [q.job.agent_id for q in queue.dead_letter] == ["b"]
        assert await queue.requeue_stalled() == 0


class TestPgmqUpgradeQueue:
    def test_rejects_unsafe_queue_name(self) -> None:
        with pytest.raises(ValueError):
            PgmqUpgradeQueue(pool=None, name="jobs; DROP TABLE x")  # type: ignore[arg-type]

    def test_dead_letter_name(self) -> None:
        queue = PgmqUpgradeQueue(pool=None, name="upgrade_jobs")  # type: ignore[arg-type]

        assert queue.dead_letter_name == "upgrade_jobs_deadletter"
