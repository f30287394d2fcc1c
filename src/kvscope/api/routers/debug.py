"""Debug endpoints over the store's key-space.

All endpoints are read-only. Results are plain JSON; rendering is left to
the client. Errors are handled by the application's KeyspaceError handler.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from kvscope.api.dependencies import get_inspector
from kvscope.engine.histogram import HistogramResult
from kvscope.engine.inspector import KeyspaceInspector
from kvscope.engine.resolver import KeyView
from kvscope.engine.search import KeyListResult, SearchMode
from kvscope.store.base import StorageTableInfo

router = APIRouter(prefix="/debug", tags=["Debug"])


@router.get("/listkeys")
def list_keys(
    table: str = Query("", description="Table name, 'all' or 'internal'"),
    max_rows: int | None = Query(None, alias="maxrows", description="Row cap"),
    search_option: str = Query("", alias="searchOption", description="'regex' for a regex scan"),
    keymatch: str = Query("", description="Regular expression (regex search)"),
    lookback: int | None = Query(None, description="Lookback hours (partition search)"),
    urlmatch: str = Query("", description="Key substring (partition search)"),
    inspector: KeyspaceInspector = Depends(get_inspector),
) -> KeyListResult:
    """List keys of a table by regex scan or partitioned lookup.

    Examples:
        GET /debug/listkeys?table=watch&searchOption=regex&keymatch=Pod
        GET /debug/listkeys?table=all&lookback=24&urlmatch=kube-system
    """
    if search_option == SearchMode.REGEX.value:
        return inspector.list_keys(table, mode=SearchMode.REGEX, max_rows=max_rows, pattern=keymatch)
    return inspector.list_keys(
        table,
        mode=SearchMode.PARTITION,
        max_rows=max_rows,
        lookback_hours=lookback,
        key_search=urlmatch,
    )


@router.get("/histogram")
def histogram(
    prefix: str = Query("", description="Key prefix, '*' for everything"),
    inspector: KeyspaceInspector = Depends(get_inspector),
) -> HistogramResult:
    """Key counts and sizes per category. Nothing is computed without a prefix."""
    return inspector.histogram(prefix)


@router.get("/viewkey")
def view_key(
    k: str = Query(..., description="Raw key"),
    inspector: KeyspaceInspector = Depends(get_inspector),
) -> KeyView:
    """Decoded value stored at a key."""
    return inspector.view_key(k)


@router.get("/tables")
def storage_tables(inspector: KeyspaceInspector = Depends(get_inspector)) -> list[StorageTableInfo]:
    """On-disk tables backing the store."""
    return inspector.storage_tables()


@router.get("/config")
def config(inspector: KeyspaceInspector = Depends(get_inspector)) -> dict[str, Any]:
    """Effective configuration."""
    return inspector.config_dump()
