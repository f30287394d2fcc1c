"""Domain tables: key schemas, value models and the table registry."""

from kvscope.tables.keys import (
    Category,
    EventCountKey,
    ResourceSummaryKey,
    TableKey,
    WatchActivityKey,
    WatchTableKey,
    partition_id_for,
)
from kvscope.tables.models import (
    EventCounts,
    KubeWatchResult,
    ResourceEventCounts,
    ResourceSummary,
    WatchActivity,
    WatchType,
)
from kvscope.tables.registry import TableRegistry, TableScope, default_registry
from kvscope.tables.table import Table

__all__ = [
    "Category",
    "EventCountKey",
    "EventCounts",
    "KubeWatchResult",
    "ResourceEventCounts",
    "ResourceSummary",
    "ResourceSummaryKey",
    "Table",
    "TableKey",
    "TableRegistry",
    "TableScope",
    "WatchActivity",
    "WatchActivityKey",
    "WatchTableKey",
    "WatchType",
    "default_registry",
    "partition_id_for",
]
