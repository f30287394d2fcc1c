"""In-process multi-version store.

Every write appends a version stamped with a monotonically increasing commit
timestamp, so a snapshot is just a read timestamp: it sees the versions
committed before it was opened and nothing after. Writers only append, which
keeps readers and writers from blocking each other beyond a short lock.
"""

import threading
import time
from bisect import bisect_left, insort
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from kvscope.errors import KeyNotFoundError, StoreError
from kvscope.store.base import Snapshot, StorageTableInfo, Store, StoreItem


@dataclass(frozen=True, slots=True)
class _Version:
    commit_ts: int
    value: bytes | None  # None marks a tombstone
    expires_at: float | None = None

    def is_deleted_or_expired(self, now: float) -> bool:
        if self.value is None:
            return True
        return self.expires_at is not None and self.expires_at <= now

    def estimated_size(self, key: bytes) -> int:
        return len(key) + len(self.value or b"")


class MemoryStore(Store):
    """Sorted multi-version key-value store held in memory.

    Example:
        >>> store = MemoryStore()
        >>> store.put(b"/watch/0000003600/Pod/default/web/1", b"{}")
        >>> with store.view() as snap:
        ...     [item.key for item in snap.iterate(b"/watch/")]
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """Initialize empty store.

        Args:
            clock: Wall clock in Unix seconds, used to evaluate TTL expiry
        """
        self._lock = threading.Lock()
        self._keys: list[bytes] = []
        self._versions: dict[bytes, list[_Version]] = {}
        self._commit_ts = 0
        self._clock = clock

    def put(self, key: bytes, value: bytes, ttl: float | None = None) -> int:
        """Write a new version of key.

        Args:
            key: Raw key
            value: Raw value
            ttl: Optional time-to-live in seconds

        Returns:
            Commit timestamp of the new version
        """
        expires_at = self._clock() + ttl if ttl is not None else None
        return self._append(key, value, expires_at)

    def delete(self, key: bytes) -> int:
        """Write a tombstone version of key. Older versions are retained."""
        return self._append(key, None, None)

    def _append(self, key: bytes, value: bytes | None, expires_at: float | None) -> int:
        with self._lock:
            self._commit_ts += 1
            versions = self._versions.get(key)
            if versions is None:
                versions = self._versions[key] = []
                insort(self._keys, key)
            versions.append(_Version(self._commit_ts, value, expires_at))
            return self._commit_ts

    def snapshot(self) -> "MemorySnapshot":
        with self._lock:
            read_ts = self._commit_ts
        return MemorySnapshot(self, read_ts, self._clock())

    def _keys_with_prefix(self, prefix: bytes) -> list[bytes]:
        with self._lock:
            start = bisect_left(self._keys, prefix)
            keys = []
            for key in self._keys[start:]:
                if not key.startswith(prefix):
                    break
                keys.append(key)
            return keys

    def _visible_versions(self, key: bytes, read_ts: int) -> list[_Version]:
        """Versions of key committed at or before read_ts, newest first."""
        with self._lock:
            versions = list(self._versions.get(key, ()))
        return [v for v in reversed(versions) if v.commit_ts <= read_ts]

    def storage_tables(self) -> list[StorageTableInfo]:
        """Report the whole store as a single level-0 table."""
        with self._lock:
            if not self._keys:
                return []
            count = sum(len(v) for v in self._versions.values())
            size = sum(
                version.estimated_size(key)
                for key, versions in self._versions.items()
                for version in versions
            )
            return [
                StorageTableInfo(
                    level=0,
                    left_key=self._keys[0].decode("utf-8", errors="replace"),
                    right_key=self._keys[-1].decode("utf-8", errors="replace"),
                    key_count=count,
                    id="memtable",
                    size=size,
                )
            ]


class MemorySnapshot(Snapshot):
    """Read view of a MemoryStore pinned to a commit timestamp."""

    def __init__(self, store: MemoryStore, read_ts: int, now: float):
        self._store = store
        self._read_ts = read_ts
        self._now = now
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise StoreError("snapshot is closed")

    def iterate(self, prefix: bytes = b"", all_versions: bool = False) -> Iterator[StoreItem]:
        self._check_open()
        for key in self._store._keys_with_prefix(prefix):
            versions = self._store._visible_versions(key, self._read_ts)
            if not versions:
                # Written after this snapshot was opened
                continue
            if not all_versions:
                newest = versions[0]
                if newest.is_deleted_or_expired(self._now):
                    continue
                versions = [newest]
            for version in versions:
                self._check_open()
                yield StoreItem(
                    key=key,
                    version=version.commit_ts,
                    estimated_size=version.estimated_size(key),
                    is_deleted_or_expired=version.is_deleted_or_expired(self._now),
                )

    def get(self, key: bytes) -> bytes:
        self._check_open()
        versions = self._store._visible_versions(key, self._read_ts)
        if not versions or versions[0].is_deleted_or_expired(self._now):
            raise KeyNotFoundError(f"Key not found: {key.decode('utf-8', errors='replace')}", key=key)
        return versions[0].value

    def close(self) -> None:
        self._closed = True
