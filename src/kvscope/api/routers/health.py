"""Liveness and store status endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from kvscope.api.dependencies import get_inspector
from kvscope.engine.inspector import KeyspaceInspector
from kvscope.version import __version__

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str = Field(description="Always ok while the process serves requests")
    version: str = Field(description="kvscope version")


class StatusResponse(BaseModel):
    """Store the debug endpoints read from and how its keys are laid out."""

    version: str = Field(description="kvscope version")
    backend: str = Field(description="Store backend (rocksdb or memory)")
    db_path: str = Field(description="RocksDB directory")
    read_only: bool = Field(description="Whether RocksDB was opened read-only")
    tables: list[str] = Field(description="Domain tables in 'all' order")
    internal_prefix: str = Field(description="Sentinel prefix of internal keys")
    partition_duration_hours: int = Field(description="Width of a time partition")


@router.get("/health")
async def health() -> HealthResponse:
    """Liveness probe. Does not touch the store."""
    return HealthResponse(status="ok", version=__version__)


@router.get("/status")
def status(inspector: KeyspaceInspector = Depends(get_inspector)) -> StatusResponse:
    """Opened store and table layout.

    Opens the store on first use, so a store that cannot be opened surfaces
    here as a 500 rather than on the first debug query.
    """
    config = inspector.config
    return StatusResponse(
        version=__version__,
        backend=config.backend,
        db_path=config.db_path,
        read_only=config.read_only,
        tables=inspector.registry.names,
        internal_prefix=inspector.registry.internal_prefix,
        partition_duration_hours=config.partition_duration_hours,
    )
