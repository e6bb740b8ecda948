"""Tests for the in-memory and file checkpoint stores."""

import os
import time
import asyncio
import pytest

from knowledge.checkpoints.store import (
    FileCheckpointStore,
    InMemoryCheckpointStore,
    StoreError,
    create_checkpoint_store,
)
from knowledge.common.config import CheckpointConfig, KBConfig


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------- In-memory ---------- #

@pytest.mark.asyncio
async def test_memory_save_then_load():
    store = InMemoryCheckpointStore()
    await store.save("cp1", {"results": [], "pinnedIds": ["a"]})

    assert await store.load("cp1") == {"results": [], "pinnedIds": ["a"]}
    assert await store.load("missing") is None
    assert await store.load("") is None


@pytest.mark.asyncio
async def test_memory_overwrite_last_writer_wins():
    store = InMemoryCheckpointStore()
    await store.save("cp1", {"v": 1})
    await store.save("cp1", {"v": 2})

    assert await store.load("cp1") == {"v": 2}
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_memory_load_returns_independent_copies():
    store = InMemoryCheckpointStore()
    original = {"pinnedIds": ["a"]}
    await store.save("cp1", original)

    original["pinnedIds"].append("mutated-after-save")
    first = await store.load("cp1")
    first["pinnedIds"].append("mutated-after-load")

    assert await store.load("cp1") == {"pinnedIds": ["a"]}


@pytest.mark.asyncio
async def test_memory_entries_expire_after_ttl():
    clock = FakeClock()
    store = InMemoryCheckpointStore(ttl_seconds=60, clock=clock)
    await store.save("cp1", {"v": 1})

    clock.advance(59)
    assert await store.load("cp1") == {"v": 1}

    clock.advance(1)
    assert await store.load("cp1") is None
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_memory_rewrite_refreshes_ttl():
    clock = FakeClock()
    store = InMemoryCheckpointStore(ttl_seconds=60, clock=clock)
    await store.save("cp1", {"v": 1})
    clock.advance(50)
    await store.save("cp1", {"v": 2})
    clock.advance(50)

    assert await store.load("cp1") == {"v": 2}


@pytest.mark.asyncio
async def test_memory_zero_ttl_never_expires():
    clock = FakeClock()
    store = InMemoryCheckpointStore(ttl_seconds=0, clock=clock)
    await store.save("cp1", {"v": 1})
    clock.advance(10 ** 9)

    assert await store.load("cp1") == {"v": 1}


@pytest.mark.asyncio
async def test_memory_max_entries_evicts_oldest():
    store = InMemoryCheckpointStore(max_entries=3)
    for i in range(5):
        await store.save(f"cp{i}", {"i": i})

    assert await store.count() == 3
    assert await store.load("cp0") is None
    assert await store.load("cp1") is None
    assert await store.load("cp4") == {"i": 4}


@pytest.mark.asyncio
async def test_memory_purge_expired_reports_count():
    clock = FakeClock()
    store = InMemoryCheckpointStore(ttl_seconds=10, clock=clock)
    await store.save("a", 1)
    await store.save("b", 2)
    clock.advance(11)

    assert await store.purge_expired() == 2


@pytest.mark.asyncio
async def test_memory_rejects_unserializable_values():
    store = InMemoryCheckpointStore()
    with pytest.raises(StoreError):
        await store.save("cp1", {"bad": {1, 2, 3}})
    assert await store.load("cp1") is None


@pytest.mark.asyncio
async def test_memory_rejects_empty_id():
    store = InMemoryCheckpointStore()
    with pytest.raises(StoreError):
        await store.save("", {"v": 1})


@pytest.mark.asyncio
async def test_concurrent_saves_leave_one_complete_value():
    store = InMemoryCheckpointStore()
    payloads = [{"writer": i, "results": [{"id": f"r{i}-{j}"} for j in range(20)]} for i in range(50)]

    await asyncio.gather(*(store.save("shared", p) for p in payloads))

    stored = await store.load("shared")
    assert stored in payloads


# ---------- File ---------- #

@pytest.mark.asyncio
async def test_file_save_then_load(tmp_path):
    store = FileCheckpointStore(str(tmp_path / "cp"))
    await store.save("abc_123-x", {"results": [], "query": "vendor"})

    assert (tmp_path / "cp" / "abc_123-x.json").exists()
    assert await store.load("abc_123-x") == {"results": [], "query": "vendor"}


@pytest.mark.asyncio
async def test_file_store_survives_reopen(tmp_path):
    await FileCheckpointStore(str(tmp_path)).save("cp1", {"v": 1})

    reopened = FileCheckpointStore(str(tmp_path))
    assert await reopened.load("cp1") == {"v": 1}


@pytest.mark.asyncio
async def test_file_store_leaves_no_temp_files(tmp_path):
    store = FileCheckpointStore(str(tmp_path))
    for i in range(5):
        await store.save("cp1", {"v": i})

    assert sorted(p.name for p in tmp_path.iterdir()) == ["cp1.json"]
    assert await store.load("cp1") == {"v": 4}


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", ["../escape", "a/b", "has space", "x" * 129])
async def test_file_store_rejects_unsafe_ids(tmp_path, bad_id):
    store = FileCheckpointStore(str(tmp_path))

    with pytest.raises(StoreError):
        await store.save(bad_id, {"v": 1})
    assert await store.load(bad_id) is None


@pytest.mark.asyncio
async def test_file_store_expires_by_mtime(tmp_path):
    store = FileCheckpointStore(str(tmp_path), ttl_seconds=60)
    await store.save("old", {"v": 1})
    await store.save("fresh", {"v": 2})

    stale = time.time() - 120
    os.utime(tmp_path / "old.json", (stale, stale))

    assert await store.load("old") is None
    assert not (tmp_path / "old.json").exists()
    assert await store.load("fresh") == {"v": 2}
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_file_store_purges_orphaned_temp_files(tmp_path):
    store = FileCheckpointStore(str(tmp_path), ttl_seconds=60)
    orphan = tmp_path / ".abc123.tmp"
    orphan.write_text('{"half": ')
    stale = time.time() - 120
    os.utime(orphan, (stale, stale))

    await store.save("cp1", {"v": 1})

    assert not orphan.exists()
    assert sorted(p.name for p in tmp_path.iterdir()) == ["cp1.json"]


@pytest.mark.asyncio
@pytest.mark.parametrize("make_store", [
    lambda path: InMemoryCheckpointStore(),
    lambda path: FileCheckpointStore(str(path)),
])
async def test_lone_surrogate_values_raise_store_error(tmp_path, make_store):
    store = make_store(tmp_path)

    with pytest.raises(StoreError):
        await store.save("cp1", {"x": "\ud800"})
    assert await store.load("cp1") is None
    assert list(tmp_path.glob(".*.tmp")) == []


@pytest.mark.asyncio
async def test_file_store_corrupted_file_raises(tmp_path):
    store = FileCheckpointStore(str(tmp_path))
    (tmp_path / "broken.json").write_text("{not json")

    with pytest.raises(StoreError):
        await store.load("broken")


# ---------- Factory ---------- #

def test_factory_defaults_to_memory():
    store = create_checkpoint_store(KBConfig())
    assert isinstance(store, InMemoryCheckpointStore)
    assert store.ttl_seconds == 3600.0
    assert store.max_entries == 1000


def test_factory_builds_file_store(tmp_path):
    store = create_checkpoint_store(CheckpointConfig(backend="file", directory=str(tmp_path / "cps")))
    assert isinstance(store, FileCheckpointStore)
    assert (tmp_path / "cps").is_dir()


def test_factory_rejects_unknown_backend():
    with pytest.raises(ValueError):
        create_checkpoint_store(CheckpointConfig(backend="redis"))
