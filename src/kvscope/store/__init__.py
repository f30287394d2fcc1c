"""Store abstraction and backends."""

from kvscope.store.base import Snapshot, StorageTableInfo, Store, StoreItem
from kvscope.store.database import get_store, open_store, reset_store
from kvscope.store.memory import MemorySnapshot, MemoryStore

__all__ = [
    "MemorySnapshot",
    "MemoryStore",
    "Snapshot",
    "StorageTableInfo",
    "Store",
    "StoreItem",
    "get_store",
    "open_store",
    "reset_store",
]
