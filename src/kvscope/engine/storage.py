"""Listing of the on-disk tables backing the store."""

from kvscope.store.base import StorageTableInfo, Store


def list_storage_tables(store: Store) -> list[StorageTableInfo]:
    """On-disk tables ordered by level, then by smallest key."""
    return sorted(store.storage_tables(), key=lambda t: (t.level, t.left_key, t.id))
