from __future__ import annotations

import json

import pytest

from model.run import RunState, RunStatus
from repository.archive_repository import ArchiveRepository
from repository.namespaces import ARCHIVES, RUN_EVENTS, RUN_STATE
from repository.run_state_repository import RunStateRepository


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the repositories (bytes in, bytes out)."""

    def __init__(self) -> None:
        self.values: dict[str, bytes] = {}
        self.hashes: dict[str, dict[bytes, bytes]] = {}
        self.published: list[tuple[str, bytes]] = []
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> bytes | None:
        return self.values.get(key)

    async def set(self, key: str, value: bytes) -> bool:
        self.values[key] = value
        return True

    async def publish(self, channel: str, message: bytes) -> int:
        self.published.append((channel, message))
        return 0

    async def hset(self, key: str, mapping: dict) -> int:
        h = self.hashes.setdefault(key, {})
        for k, v in mapping.items():
            h[k.encode("utf-8")] = v if isinstance(v, bytes) else str(v).encode("utf-8")
        return len(mapping)

    async def hgetall(self, key: str) -> dict[bytes, bytes]:
        return dict(self.hashes.get(key, {}))

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return key in self.hashes or key in self.values

    async def delete(self, key: str) -> int:
        return int(self.hashes.pop(key, None) is not None)


@pytest.mark.anyio
async def test_get_returns_default_before_any_run() -> None:
    state = await RunStateRepository(FakeRedis()).get()

    assert state.status is RunStatus.idle
    assert state.courseId is None
    assert state.items == [] and state.log == []
    assert state.completedCount == 0 and state.totalVideoLectures == 0


@pytest.mark.anyio
async def test_set_persists_bumps_version_and_publishes() -> None:
    redis = FakeRedis()
    repo = RunStateRepository(redis)

    stored = await repo.set(RunState(status=RunStatus.running, courseId=5, courseTitle="C"))

    assert stored.version == 1
    assert json.loads(redis.values[RUN_STATE])["courseId"] == 5
    assert redis.published[0][0] == RUN_EVENTS
    reread = await repo.get()
    assert reread.status is RunStatus.running and reread.version == 1


@pytest.mark.anyio
async def test_update_reads_latest_record() -> None:
    redis = FakeRedis()
    repo = RunStateRepository(redis)
    await repo.set(RunState(status=RunStatus.running, courseId=5))

    # another writer (e.g. a PAUSE command) lands between two pipeline writes
    other = RunStateRepository(redis)
    await other.update(lambda s: s.model_copy(update={"status": RunStatus.paused}))

    updated = await repo.update(lambda s: s.model_copy(update={"currentTask": "Processing: x"}))

    assert updated.status is RunStatus.paused
    assert updated.version == 3


@pytest.mark.anyio
async def test_subscribers_see_every_write_until_unsubscribed() -> None:
    repo = RunStateRepository(FakeRedis())
    seen: list[int] = []
    unsubscribe = repo.subscribe(lambda s: seen.append(s.version))

    await repo.set(RunState())
    await repo.update(lambda s: s)
    unsubscribe()
    await repo.update(lambda s: s)

    assert seen == [1, 2]


@pytest.mark.anyio
async def test_broken_listener_does_not_fail_the_write() -> None:
    repo = RunStateRepository(FakeRedis())

    def explode(_: RunState) -> None:
        raise RuntimeError("observer bug")

    repo.subscribe(explode)

    stored = await repo.set(RunState(currentTask="still saved"))
    assert (await repo.get()).currentTask == stored.currentTask == "still saved"


@pytest.mark.anyio
async def test_corrupt_record_reads_as_default() -> None:
    redis = FakeRedis()
    redis.values[RUN_STATE] = b"{not json"

    assert (await RunStateRepository(redis).get()).status is RunStatus.idle


@pytest.mark.anyio
async def test_archive_repository_round_trip() -> None:
    redis = FakeRedis()
    repo = ArchiveRepository(redis, ttl_seconds=60)

    assert await repo.latest() is None
    await repo.deliver("Course_Transcripts.zip", b"PK\x03\x04data")

    assert await repo.latest() == ("Course_Transcripts.zip", b"PK\x03\x04data")
    assert redis.ttls[f"{ARCHIVES}:latest"] == 60
    assert await repo.discard() == 1
    assert await repo.latest() is None
