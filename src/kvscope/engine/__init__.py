"""Scan-and-classify engine."""

from kvscope.engine.categorize import categorize
from kvscope.engine.histogram import (
    CategoryStats,
    HistogramAccumulator,
    HistogramResult,
    InternalKeyRules,
    InternalKind,
    KeyStats,
    compute_histogram,
)
from kvscope.engine.inspector import KeyspaceInspector
from kvscope.engine.resolver import KeyView, view_key
from kvscope.engine.scanner import ScanAction, scan
from kvscope.engine.search import KeyListResult, SearchMode, compile_pattern, list_keys
from kvscope.engine.storage import list_storage_tables

__all__ = [
    "CategoryStats",
    "HistogramAccumulator",
    "HistogramResult",
    "InternalKeyRules",
    "InternalKind",
    "KeyListResult",
    "KeyStats",
    "KeyView",
    "KeyspaceInspector",
    "ScanAction",
    "SearchMode",
    "categorize",
    "compile_pattern",
    "compute_histogram",
    "list_keys",
    "list_storage_tables",
    "scan",
    "view_key",
]
