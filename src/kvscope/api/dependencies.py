"""FastAPI dependencies."""

from kvscope.engine.inspector import KeyspaceInspector
from kvscope.settings import settings
from kvscope.store.database import get_store

_inspector: KeyspaceInspector | None = None


def get_inspector() -> KeyspaceInspector:
    """Inspector over the process-wide store.

    Raises:
        StoreError: If the store cannot be opened
    """
    global _inspector

    if _inspector is None:
        _inspector = KeyspaceInspector(get_store(settings), config=settings)
    return _inspector
