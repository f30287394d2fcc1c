"""kvscope API Server - FastAPI application exposing the debug endpoints.

Running the Server
------------------

Development (with auto-reload):
    kvscope serve --reload

Production:
    kvscope serve --host 0.0.0.0 --port 8080

Endpoints
---------
- /                  : API information
- /health            : Health check with version
- /status            : Store and table layout
- /debug/listkeys    : Regex or partitioned key listing
- /debug/histogram   : Key counts and sizes per category
- /debug/viewkey     : Decoded value of one key
- /debug/tables      : On-disk tables
- /debug/config      : Effective configuration
- /docs              : OpenAPI documentation
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from kvscope.api.routers.debug import router as debug_router
from kvscope.api.routers.health import router as health_router
from kvscope.errors import (
    InvalidKeyError,
    InvalidPatternError,
    KeyNotFoundError,
    KeyspaceError,
    UnknownTableError,
)
from kvscope.log import configure_logging
from kvscope.settings import settings
from kvscope.version import __version__

# First match wins; anything else is a server-side failure
ERROR_STATUS: list[tuple[type[KeyspaceError], int]] = [
    (KeyNotFoundError, 404),
    (InvalidKeyError, 400),
    (InvalidPatternError, 400),
    (UnknownTableError, 400),
]


def status_for(error: KeyspaceError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging(settings.log_level)
    logger.info("Starting kvscope API")
    yield
    logger.info("Shutting down kvscope API")


async def keyspace_error_handler(request: Request, exc: KeyspaceError) -> JSONResponse:
    status_code = status_for(exc)
    logger.error(f"{request.method} {request.url.path} failed ({status_code}): {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="kvscope API",
        description="Read-only key-space introspection",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {"name": "kvscope API", "version": __version__, "docs": "/docs"}

    app.add_exception_handler(KeyspaceError, keyspace_error_handler)
    app.include_router(health_router)
    app.include_router(debug_router)

    return app


app = create_app()
