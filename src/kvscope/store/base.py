"""Read-only store abstraction consumed by the inspection engine.

A store hands out snapshots: consistent, isolated views of the key-space at
the moment they were opened. Snapshots iterate keys in ascending byte order
and may expose several retained versions of the same key.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from pydantic import BaseModel, Field


@dataclass(frozen=True, slots=True)
class StoreItem:
    """One stored version of a key as seen by a snapshot."""

    key: bytes
    version: int
    estimated_size: int
    is_deleted_or_expired: bool = False


class StorageTableInfo(BaseModel):
    """On-disk table (SST file or equivalent) backing the store."""

    level: int = Field(description="LSM level the table lives on")
    left_key: str = Field(description="Smallest key in the table")
    right_key: str = Field(description="Largest key in the table")
    key_count: int = Field(description="Number of entries in the table")
    id: str = Field(description="Table identifier (file name)")
    size: int = Field(description="Table size in bytes")


class Snapshot(ABC):
    """Consistent read view of a store."""

    @abstractmethod
    def iterate(self, prefix: bytes = b"", all_versions: bool = False) -> Iterator[StoreItem]:
        """Yield stored items under prefix in ascending key order.

        Args:
            prefix: Only keys starting with these bytes are yielded (empty = all)
            all_versions: Yield every retained version, newest first per key,
                including deleted or expired ones. Otherwise yield only the
                newest live version of each key.

        Raises:
            StoreError: If the backend fails while iterating
        """
        pass

    @abstractmethod
    def get(self, key: bytes) -> bytes:
        """Return the newest live value for key.

        Raises:
            KeyNotFoundError: If the key has no live value
            StoreError: If the backend read fails
        """
        pass

    def close(self) -> None:
        """Release the snapshot."""


class Store(ABC):
    """Sorted, versioned key-value store."""

    @abstractmethod
    def snapshot(self) -> Snapshot:
        """Open a new snapshot. Callers must close it; prefer view()."""
        pass

    @contextmanager
    def view(self) -> Iterator[Snapshot]:
        """Scope a snapshot to a with-block, releasing it on every exit path.

        Example:
            >>> with store.view() as snap:
            ...     value = snap.get(b"/watch/...")
        """
        snap = self.snapshot()
        try:
            yield snap
        finally:
            snap.close()

    @abstractmethod
    def storage_tables(self) -> list[StorageTableInfo]:
        """List the on-disk tables backing the store."""
        pass

    def close(self) -> None:
        """Release backend resources."""
