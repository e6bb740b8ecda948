"""
Checkpoint Store

Key-value persistence for retrieval snapshots.

Contract:
- save(id, data): create or overwrite; last writer wins
- load(id): the stored value, or None when missing/expired

Writes to one id are serialized by a per-key asyncio.Lock, and every value is
kept as serialized JSON so a reader never observes a half-written or shared
mutable object. Checkpoints are conversational-turn scoped, so both backends
expire entries instead of growing without bound.
"""

import os
import re
import json
import time
import asyncio
import logging
import tempfile
from abc import ABC, abstractmethod
from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger("foundry_kb.checkpoints")

_VALID_ID = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class StoreError(Exception):
    """Checkpoint could not be written or read."""
    pass


def _serialize(checkpoint_id: str, data: Any) -> str:
    try:
        payload = json.dumps(data, ensure_ascii=False)
        # Lone surrogates survive json.dumps but cannot be written as UTF-8
        payload.encode("utf-8")
    except (TypeError, ValueError) as e:
        raise StoreError(f"Checkpoint '{checkpoint_id}' is not JSON-serializable: {e}") from e
    return payload


class CheckpointStore(ABC):
    """
    Base class for checkpoint stores.

    Subclasses implement _write/_read/_purge; locking is handled here.
    """

    def __init__(self):
        self._key_locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, checkpoint_id: str) -> asyncio.Lock:
        lock = self._key_locks.get(checkpoint_id)
        if lock is None:
            lock = asyncio.Lock()
            self._key_locks[checkpoint_id] = lock
        return lock

    def _forget_lock(self, checkpoint_id: str) -> None:
        lock = self._key_locks.get(checkpoint_id)
        if lock is not None and not lock.locked():
            del self._key_locks[checkpoint_id]

    async def save(self, checkpoint_id: str, data: Any) -> None:
        """
        Create or overwrite a checkpoint.

        Raises:
            StoreError: If the value is not JSON-serializable or cannot be written
        """
        if not checkpoint_id:
            raise StoreError("Checkpoint id must be a non-empty string")
        payload = _serialize(checkpoint_id, data)
        async with self._lock_for(checkpoint_id):
            await self._write(checkpoint_id, payload)
        evicted = await self.purge_expired()
        if evicted:
            logger.debug(f"Evicted {evicted} expired checkpoint(s)")

    async def load(self, checkpoint_id: str) -> Optional[Any]:
        """
        Load a checkpoint.

        Returns:
            A fresh copy of the stored value, or None if missing or expired
        """
        if not checkpoint_id:
            return None
        payload = await self._read(checkpoint_id)
        if payload is None:
            return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError as e:
            raise StoreError(f"Checkpoint '{checkpoint_id}' is corrupted: {e}") from e

    @abstractmethod
    async def _write(self, checkpoint_id: str, payload: str) -> None:
        """Persist serialized JSON atomically"""

    @abstractmethod
    async def _read(self, checkpoint_id: str) -> Optional[str]:
        """Return serialized JSON or None"""

    @abstractmethod
    async def purge_expired(self) -> int:
        """Drop expired entries; returns how many were removed"""

    @abstractmethod
    async def count(self) -> int:
        """Number of live (unexpired) checkpoints"""


class InMemoryCheckpointStore(CheckpointStore):
    """
    Process-local store with TTL expiry and oldest-first eviction.

    Usage:
        store = InMemoryCheckpointStore(ttl_seconds=3600, max_entries=1000)
        await store.save("abc", {"results": [], "pinnedIds": []})
        data = await store.load("abc")
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            ttl_seconds: Lifetime of an entry since its last write (<= 0 disables expiry)
            max_entries: Upper bound on stored entries (<= 0 disables the bound)
            clock: Monotonic time source, injectable for tests
        """
        super().__init__()
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # id -> (written_at, payload); ordered by last write
        self._entries: "OrderedDict[str, Tuple[float, str]]" = OrderedDict()

    def _is_expired(self, written_at: float, now: float) -> bool:
        return self.ttl_seconds > 0 and now - written_at >= self.ttl_seconds

    async def _write(self, checkpoint_id: str, payload: str) -> None:
        self._entries[checkpoint_id] = (self._clock(), payload)
        self._entries.move_to_end(checkpoint_id)
        if self.max_entries > 0:
            while len(self._entries) > self.max_entries:
                oldest_id, _ = self._entries.popitem(last=False)
                self._forget_lock(oldest_id)
                logger.debug(f"Evicted checkpoint {oldest_id} (max_entries={self.max_entries})")

    async def _read(self, checkpoint_id: str) -> Optional[str]:
        entry = self._entries.get(checkpoint_id)
        if entry is None:
            return None
        written_at, payload = entry
        if self._is_expired(written_at, self._clock()):
            self._entries.pop(checkpoint_id, None)
            self._forget_lock(checkpoint_id)
            return None
        return payload

    async def purge_expired(self) -> int:
        if self.ttl_seconds <= 0:
            return 0
        now = self._clock()
        expired = [cid for cid, (written_at, _) in self._entries.items()
                   if self._is_expired(written_at, now)]
        for cid in expired:
            del self._entries[cid]
            self._forget_lock(cid)
        return len(expired)

    async def count(self) -> int:
        await self.purge_expired()
        return len(self._entries)


class FileCheckpointStore(CheckpointStore):
    """
    One JSON file per checkpoint under a directory.

    Writes go to a temp file in the same directory followed by os.replace,
    so readers see either the old or the new file. Expiry uses file mtime.
    """

    def __init__(self, directory: str, ttl_seconds: float = 3600.0):
        """
        Args:
            directory: Directory for <id>.json files (created if missing)
            ttl_seconds: Lifetime since last write (<= 0 disables expiry)
        """
        super().__init__()
        self.directory = Path(directory).expanduser()
        self.ttl_seconds = ttl_seconds
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create checkpoint directory {self.directory}: {e}") from e

    def _path(self, checkpoint_id: str) -> Path:
        if not _VALID_ID.match(checkpoint_id):
            raise StoreError(
                f"Invalid checkpoint id '{checkpoint_id}': use letters, digits, '-' or '_' (max 128)"
            )
        return self.directory / f"{checkpoint_id}.json"

    def _is_expired(self, path: Path) -> bool:
        if self.ttl_seconds <= 0:
            return False
        try:
            return time.time() - path.stat().st_mtime >= self.ttl_seconds
        except FileNotFoundError:
            return True

    def _write_sync(self, path: Path, payload: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    async def _write(self, checkpoint_id: str, payload: str) -> None:
        path = self._path(checkpoint_id)
        try:
            await asyncio.to_thread(self._write_sync, path, payload)
        except (OSError, UnicodeEncodeError) as e:
            raise StoreError(f"Failed to write checkpoint '{checkpoint_id}': {e}") from e

    def _read_sync(self, path: Path) -> Optional[str]:
        if not path.exists():
            return None
        if self._is_expired(path):
            path.unlink(missing_ok=True)
            return None
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    async def _read(self, checkpoint_id: str) -> Optional[str]:
        try:
            path = self._path(checkpoint_id)
        except StoreError:
            # An id that can never have been written is simply not found
            return None
        try:
            return await asyncio.to_thread(self._read_sync, path)
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(f"Failed to read checkpoint '{checkpoint_id}': {e}") from e

    def _purge_sync(self) -> List[str]:
        removed = []
        for path in self.directory.glob("*.json"):
            if self._is_expired(path):
                path.unlink(missing_ok=True)
                removed.append(path.stem)
        # Temp files orphaned by a crash mid-write
        for path in self.directory.glob(".*.tmp"):
            if self._is_expired(path):
                path.unlink(missing_ok=True)
        return removed

    async def purge_expired(self) -> int:
        if self.ttl_seconds <= 0:
            return 0
        removed = await asyncio.to_thread(self._purge_sync)
        for checkpoint_id in removed:
            self._forget_lock(checkpoint_id)
        return len(removed)

    async def count(self) -> int:
        await self.purge_expired()
        return await asyncio.to_thread(lambda: sum(1 for _ in self.directory.glob("*.json")))


def create_checkpoint_store(config) -> CheckpointStore:
    """
    Factory: build the store selected by CheckpointConfig.backend.

    Args:
        config: CheckpointConfig (or KBConfig, whose .checkpoint is used)
    """
    checkpoint_config = getattr(config, "checkpoint", config)
    backend = (checkpoint_config.backend or "memory").lower()

    if backend == "memory":
        logger.info(
            f"Using in-memory checkpoint store (ttl={checkpoint_config.ttl_seconds}s, "
            f"max_entries={checkpoint_config.max_entries})"
        )
        return InMemoryCheckpointStore(
            ttl_seconds=checkpoint_config.ttl_seconds,
            max_entries=checkpoint_config.max_entries,
        )
    if backend == "file":
        logger.info(f"Using file checkpoint store at {checkpoint_config.directory}")
        return FileCheckpointStore(
            directory=checkpoint_config.directory,
            ttl_seconds=checkpoint_config.ttl_seconds,
        )
    raise ValueError(f"Unknown checkpoint backend '{checkpoint_config.backend}' (expected 'memory' or 'file')")
