"""Store singleton for kvscope."""

from loguru import logger

from kvscope.settings import Settings, settings
from kvscope.store.base import Store
from kvscope.store.memory import MemoryStore

# Module-level singleton (avoid lru_cache caching exceptions)
_store_instance: Store | None = None


def open_store(config: Settings) -> Store:
    """Open the store backend named by config.

    Args:
        config: Settings with backend, db_path and read_only

    Returns:
        Opened store

    Raises:
        StoreError: If the backend cannot be opened
    """
    if config.backend == "memory":
        logger.warning("Using empty in-memory store - nothing persists across restarts")
        return MemoryStore()

    # Imported lazily so the memory backend works without RocksDB libraries
    from kvscope.store.rocks import RocksStore

    logger.info(f"Opening RocksDB store at {config.db_path}")
    return RocksStore(config.db_path, read_only=config.read_only)


def get_store(config: Settings | None = None) -> Store:
    """Get or create the store singleton.

    Args:
        config: Optional settings override (defaults to module settings)

    Returns:
        Store instance

    Example:
        >>> store = get_store()
        >>> with store.view() as snap:
        ...     snap.get(b"/watch/...")
    """
    global _store_instance

    if _store_instance is None:
        _store_instance = open_store(config or settings)
    return _store_instance


def reset_store() -> None:
    """Close and forget the singleton."""
    global _store_instance

    if _store_instance is not None:
        _store_instance.close()
        _store_instance = None
