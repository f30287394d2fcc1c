"""Table registry: explicit, ordered table configuration.

The registry is built once at startup and never mutated. It answers three
questions: which table a name refers to, which scan scopes a table selector
expands to, and which table owns an arbitrary raw key.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from kvscope.errors import InvalidKeyError, UnknownTableError
from kvscope.settings import Settings
from kvscope.tables.keys import EventCountKey, ResourceSummaryKey, WatchActivityKey, WatchTableKey
from kvscope.tables.models import KubeWatchResult, ResourceEventCounts, ResourceSummary, WatchActivity
from kvscope.tables.table import Table

ALL_TABLES = "all"
INTERNAL_TABLE = "internal"

# Order used when expanding "all"
DEFAULT_TABLE_ORDER = ("watch", "eventcount", "ressum", "watchactivity")
# Order validators are probed in for single-key lookups
DEFAULT_LOOKUP_ORDER = ("watch", "ressum", "eventcount", "watchactivity")


@dataclass(frozen=True)
class TableScope:
    """What to scan for one selected table.

    ``scan_prefix`` bounds the iteration; ``match_prefix`` is an extra filter
    a key must start with to count as a candidate. For domain tables both are
    the table prefix. The internal scope scans everything but only matches
    keys under the internal sentinel.
    """

    name: str
    scan_prefix: str
    match_prefix: str
    table: Table | None = None


class TableRegistry:
    """Immutable, ordered set of domain tables."""

    def __init__(
        self,
        tables: Sequence[Table],
        internal_prefix: str,
        lookup_order: Sequence[str] | None = None,
    ):
        """Initialize registry.

        Args:
            tables: Domain tables in the order "all" expands to
            internal_prefix: Sentinel prefix of store-internal keys
            lookup_order: Table names in the order single-key lookups probe
                validators (defaults to table order)
        """
        self._tables = tuple(tables)
        self._by_name = {table.name: table for table in self._tables}
        self.internal_prefix = internal_prefix
        names = lookup_order or [table.name for table in self._tables]
        self._lookup = tuple(self.get(name) for name in names)

    @property
    def names(self) -> list[str]:
        return [table.name for table in self._tables]

    def get(self, name: str) -> Table:
        """Table by name.

        Raises:
            UnknownTableError: If no table has that name
        """
        table = self._by_name.get(name)
        if table is None:
            raise UnknownTableError(f"Unknown table: {name}", table=name)
        return table

    def find(self, name: str) -> Table | None:
        return self._by_name.get(name)

    def internal_scope(self) -> TableScope:
        return TableScope(name=INTERNAL_TABLE, scan_prefix="", match_prefix=self.internal_prefix)

    def resolve(self, selector: str) -> list[TableScope]:
        """Expand a table selector into scan scopes.

        Args:
            selector: A table name, "all", "internal" or "" (no tables)

        Raises:
            UnknownTableError: If selector is none of the above
        """
        if not selector:
            return []
        if selector == ALL_TABLES:
            return [self._scope(table) for table in self._tables]
        if selector == INTERNAL_TABLE:
            return [self.internal_scope()]
        return [self._scope(self.get(selector))]

    @staticmethod
    def _scope(table: Table) -> TableScope:
        return TableScope(name=table.name, scan_prefix=table.prefix, match_prefix=table.prefix, table=table)

    def owning_table(self, raw_key: str) -> Table:
        """First table, in lookup order, whose validator accepts raw_key.

        Raises:
            InvalidKeyError: If no validator accepts the key
        """
        for table in self._lookup:
            if table.key_cls.is_valid(raw_key):
                return table
        raise InvalidKeyError(f"Invalid key: {raw_key}", key=raw_key)


def default_registry(config: Settings) -> TableRegistry:
    """Registry of the four domain tables."""
    tables = {
        "watch": Table(WatchTableKey, KubeWatchResult, config.partition_duration),
        "ressum": Table(ResourceSummaryKey, ResourceSummary, config.partition_duration),
        "eventcount": Table(EventCountKey, ResourceEventCounts, config.partition_duration),
        "watchactivity": Table(WatchActivityKey, WatchActivity, config.partition_duration),
    }
    return TableRegistry(
        [tables[name] for name in DEFAULT_TABLE_ORDER],
        internal_prefix=config.internal_prefix,
        lookup_order=DEFAULT_LOOKUP_ORDER,
    )
