"""RocksDB store backend via rocksdict (Rust bindings).

RocksDB only exposes the newest visible version of each key, so snapshots
from this backend yield exactly one item per key: version 0, never flagged
deleted. Tombstones and overwritten versions are invisible through the
public iterator.
"""

from collections.abc import Iterator
from pathlib import Path

import rocksdict
from loguru import logger

from kvscope.errors import KeyNotFoundError, StoreError
from kvscope.store.base import Snapshot, StorageTableInfo, Store, StoreItem


def _text(raw: bytes | str | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


class RocksStore(Store):
    """RocksDB-backed store opened in raw (bytes) mode."""

    def __init__(self, path: str | Path, read_only: bool = True):
        """Open database.

        Args:
            path: RocksDB directory
            read_only: Open without taking the writer lock

        Raises:
            StoreError: If the database cannot be opened
        """
        self.path = Path(path)
        options = rocksdict.Options(raw_mode=True)
        access_type = (
            rocksdict.AccessType.read_only() if read_only else rocksdict.AccessType.read_write()
        )
        try:
            self.db = rocksdict.Rdict(str(self.path), options=options, access_type=access_type)
        except Exception as e:
            raise StoreError(f"failed to open RocksDB at {self.path}: {e}") from e
        logger.info(f"Opened RocksDB at {self.path} (read_only={read_only})")

    def snapshot(self) -> "RocksSnapshot":
        try:
            return RocksSnapshot(self.db.snapshot())
        except Exception as e:
            raise StoreError(f"failed to open snapshot: {e}") from e

    def storage_tables(self) -> list[StorageTableInfo]:
        """List live SST files."""
        try:
            files = self.db.live_files()
        except Exception as e:
            raise StoreError(f"failed to list live files: {e}") from e
        return [
            StorageTableInfo(
                level=f.get("level", 0),
                left_key=_text(f.get("start_key")),
                right_key=_text(f.get("end_key")),
                key_count=f.get("num_entries", 0),
                id=_text(f.get("name")),
                size=f.get("size", 0),
            )
            for f in files
        ]

    def close(self) -> None:
        self.db.close()


class RocksSnapshot(Snapshot):
    """Wrapper over a rocksdict snapshot."""

    def __init__(self, snap: "rocksdict.Snapshot"):
        self._snap = snap

    def _handle(self) -> "rocksdict.Snapshot":
        if self._snap is None:
            raise StoreError("snapshot is closed")
        return self._snap

    def iterate(self, prefix: bytes = b"", all_versions: bool = False) -> Iterator[StoreItem]:
        try:
            it = self._handle().iter()
            it.seek(prefix)
            while it.valid():
                key = bytes(it.key())
                if not key.startswith(prefix):
                    break
                value = it.value()
                yield StoreItem(key=key, version=0, estimated_size=len(key) + len(value))
                it.next()
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"iteration failed under prefix {prefix!r}: {e}") from e

    def get(self, key: bytes) -> bytes:
        try:
            return self._handle()[key]
        except KeyError:
            raise KeyNotFoundError(f"Key not found: {_text(key)}", key=key)
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"get failed for key {_text(key)}: {e}") from e

    def close(self) -> None:
        self._snap = None
