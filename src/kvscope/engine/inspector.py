"""Inspector facade: the read-only query operations of the presentation layers.

Each operation opens exactly one snapshot for its duration and releases it
on every exit path. Nothing is cached between calls.
"""

import re
from datetime import datetime
from typing import Any

from loguru import logger

from kvscope.engine.histogram import HistogramResult, InternalKeyRules, compute_histogram
from kvscope.engine.resolver import KeyView, view_key
from kvscope.engine.search import KeyListResult, SearchMode, list_keys
from kvscope.engine.storage import list_storage_tables
from kvscope.settings import Settings
from kvscope.store.base import StorageTableInfo, Store
from kvscope.tables.registry import TableRegistry, default_registry


class KeyspaceInspector:
    """Read-only queries over a store's key-space."""

    def __init__(
        self,
        store: Store,
        registry: TableRegistry | None = None,
        config: Settings | None = None,
    ):
        """Initialize inspector.

        Args:
            store: Store to query
            registry: Table registry (defaults to the four domain tables)
            config: Settings providing defaults (defaults to a fresh Settings())
        """
        self.store = store
        self.config = config or Settings()
        self.registry = registry or default_registry(self.config)
        self.rules = InternalKeyRules.for_sentinel(self.registry.internal_prefix)

    def list_keys(
        self,
        table: str,
        *,
        mode: SearchMode = SearchMode.PARTITION,
        max_rows: int | None = None,
        pattern: str | re.Pattern | None = None,
        lookback_hours: int | None = None,
        key_search: str = "",
        now: datetime | None = None,
    ) -> KeyListResult:
        """List or search keys of a table selector. See search.list_keys."""
        max_rows = self.config.default_max_rows if max_rows is None else max_rows
        if lookback_hours is None:
            lookback_hours = self.config.default_lookback_hours
        with self.store.view() as snap:
            result = list_keys(
                snap,
                self.registry,
                table,
                mode=mode,
                max_rows=max_rows,
                pattern=pattern,
                lookback_hours=lookback_hours,
                key_search=key_search,
                now=now,
            )
        logger.info(
            f"Listed keys of {table!r} ({mode.value}): "
            f"{result.matched_count} matched of {result.total_scanned} scanned"
        )
        return result

    def histogram(self, prefix: str | None) -> HistogramResult:
        """Histogram under prefix ("*" for everything, empty to skip)."""
        with self.store.view() as snap:
            return compute_histogram(snap, self.registry, prefix, self.rules)

    def view_key(self, raw_key: str) -> KeyView:
        """Table and decoded value of one key."""
        with self.store.view() as snap:
            return view_key(snap, self.registry, raw_key)

    def storage_tables(self) -> list[StorageTableInfo]:
        """On-disk tables backing the store."""
        return list_storage_tables(self.store)

    def config_dump(self) -> dict[str, Any]:
        """Effective configuration."""
        return self.config.model_dump(mode="json")
