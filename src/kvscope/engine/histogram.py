"""Key-space histogram: counts and sizes per key category.

One pass over every stored version under a prefix. Each entry is either an
internal bookkeeping key of the store (under the internal sentinel) or a
domain key. Internal keys are sub-classified by ordered prefix rules; domain
keys are grouped by category with running size statistics.
"""

from collections.abc import Sequence
from enum import Enum

from loguru import logger
from pydantic import BaseModel, Field

from kvscope.engine.categorize import categorize
from kvscope.engine.scanner import ScanAction, scan
from kvscope.errors import CategorizationError
from kvscope.store.base import Snapshot, StoreItem
from kvscope.tables.keys import Category
from kvscope.tables.registry import TableRegistry

WHOLE_KEYSPACE = "*"


class InternalKind(str, Enum):
    """Sub-classes of store-internal keys."""

    HEAD = "head"
    MOVE = "move"
    DISCARD = "discard"
    OTHER = "other"


class InternalKeyRules:
    """Ordered prefix rules classifying internal keys. First match wins."""

    def __init__(self, sentinel: str, rules: Sequence[tuple[str, InternalKind]]):
        self.sentinel = sentinel.encode()
        self.rules = tuple((prefix.encode(), kind) for prefix, kind in rules)

    @classmethod
    def for_sentinel(cls, sentinel: str) -> "InternalKeyRules":
        """Default head/move/discard rules under sentinel (e.g. ``!kv!head``)."""
        return cls(
            sentinel,
            [
                (f"{sentinel}!head", InternalKind.HEAD),
                (f"{sentinel}!move", InternalKind.MOVE),
                (f"{sentinel}!discard", InternalKind.DISCARD),
            ],
        )

    def is_internal(self, key: bytes) -> bool:
        return key.startswith(self.sentinel)

    def classify(self, key: bytes) -> InternalKind:
        for prefix, kind in self.rules:
            if key.startswith(prefix):
                return kind
        return InternalKind.OTHER


class KeyStats(BaseModel):
    """Running size statistics of one category."""

    minimum_size: int
    maximum_size: int
    total_keys: int
    total_size: int
    average_size: int

    @classmethod
    def first(cls, size: int) -> "KeyStats":
        return cls(minimum_size=size, maximum_size=size, total_keys=1, total_size=size, average_size=size)

    def observe(self, size: int) -> None:
        self.total_keys += 1
        self.total_size += size
        self.average_size = self.total_size // self.total_keys
        if size < self.minimum_size:
            self.minimum_size = size
        if size > self.maximum_size:
            self.maximum_size = size


class CategoryStats(BaseModel):
    """Statistics of one category."""

    table: str
    partition_id: str
    stats: KeyStats


class HistogramResult(BaseModel):
    """Aggregate counts of one histogram run."""

    computed: bool = Field(default=False, description="False when no prefix was requested")
    prefix: str = Field(default="", description="Prefix filter as requested")
    total_keys: int = 0
    total_estimated_size: int = 0
    deleted_or_expired_keys: int = 0
    internal_keys: int = 0
    internal_keys_size: int = 0
    head_keys: int = 0
    move_keys: int = 0
    discard_keys: int = 0
    other_internal_keys: int = 0
    domain_keys: int = 0
    categories: list[CategoryStats] = Field(default_factory=list)

    def stats_for(self, category: Category) -> KeyStats | None:
        for entry in self.categories:
            if (entry.table, entry.partition_id) == tuple(category):
                return entry.stats
        return None


class HistogramAccumulator:
    """Accumulates histogram counters one store item at a time.

    Example:
        >>> acc = HistogramAccumulator(registry, InternalKeyRules.for_sentinel("!kv"))
        >>> for item in items:
        ...     acc.add(item)
        >>> acc.result("*").domain_keys
    """

    def __init__(self, registry: TableRegistry, rules: InternalKeyRules):
        self.registry = registry
        self.rules = rules
        self.total_keys = 0
        self.total_estimated_size = 0
        self.deleted_or_expired_keys = 0
        self.internal_keys = 0
        self.internal_keys_size = 0
        self.domain_keys = 0
        self.internal_kinds = {kind: 0 for kind in InternalKind}
        self.categories: dict[Category, KeyStats] = {}

    def add(self, item: StoreItem) -> None:
        """Count one stored version.

        Raises:
            CategorizationError: If a domain key has no recognized shape
        """
        size = item.estimated_size
        self.total_keys += 1
        self.total_estimated_size += size
        if item.is_deleted_or_expired:
            self.deleted_or_expired_keys += 1

        if self.rules.is_internal(item.key):
            self.internal_keys += 1
            self.internal_keys_size += size
            self.internal_kinds[self.rules.classify(item.key)] += 1
            return

        self.domain_keys += 1
        try:
            category = categorize(item.key, self.registry)
        except CategorizationError as e:
            raise CategorizationError(
                f"failed to parse information about key: {item.key.hex()}: {e}", key=item.key
            ) from e

        stats = self.categories.get(category)
        if stats is None:
            self.categories[category] = KeyStats.first(size)
        else:
            stats.observe(size)

    def result(self, prefix: str) -> HistogramResult:
        return HistogramResult(
            computed=True,
            prefix=prefix,
            total_keys=self.total_keys,
            total_estimated_size=self.total_estimated_size,
            deleted_or_expired_keys=self.deleted_or_expired_keys,
            internal_keys=self.internal_keys,
            internal_keys_size=self.internal_keys_size,
            head_keys=self.internal_kinds[InternalKind.HEAD],
            move_keys=self.internal_kinds[InternalKind.MOVE],
            discard_keys=self.internal_kinds[InternalKind.DISCARD],
            other_internal_keys=self.internal_kinds[InternalKind.OTHER],
            domain_keys=self.domain_keys,
            categories=[
                CategoryStats(table=category.table, partition_id=category.partition_id, stats=stats)
                for category, stats in sorted(self.categories.items())
            ],
        )


def compute_histogram(
    snapshot: Snapshot,
    registry: TableRegistry,
    prefix: str | None,
    rules: InternalKeyRules | None = None,
) -> HistogramResult:
    """Histogram of every stored version under prefix.

    Args:
        snapshot: Read view to scan
        registry: Table registry used to categorize domain keys
        prefix: Key prefix; "*" scans the whole key-space and an empty or
            missing prefix skips the computation
        rules: Internal key rules (defaults to the registry's sentinel)

    Returns:
        HistogramResult (``computed`` is False when nothing was requested)

    Raises:
        CategorizationError: If any domain key has no recognized shape
    """
    if not prefix:
        return HistogramResult()

    accumulator = HistogramAccumulator(
        registry, rules or InternalKeyRules.for_sentinel(registry.internal_prefix)
    )

    def visit(item: StoreItem) -> ScanAction:
        accumulator.add(item)
        return ScanAction.CONTINUE

    scan_prefix = "" if prefix == WHOLE_KEYSPACE else prefix
    visited = scan(snapshot, scan_prefix.encode(), visit)
    logger.info(f"Histogram over prefix {prefix!r} visited {visited} entries")
    return accumulator.result(prefix)
