"""FastAPI application for the stableswap quoting service.

The service is read-only: it quotes against the configured pool and never
mutates it.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stableswap import __version__
from stableswap.api.endpoints import router
from stableswap.deployment import get_default_pool
from stableswap.errors import StableSwapError

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("STABLESWAP_HOST", "0.0.0.0")
PORT = int(os.environ.get("STABLESWAP_PORT", "8000"))
DEBUG = os.environ.get("STABLESWAP_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

app = FastAPI(
    title="StableSwap Pool",
    description="Quoting service for a two-asset oracle-guarded stableswap pool",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(StableSwapError)
async def pool_error_handler(request: Request, exc: StableSwapError) -> JSONResponse:
    """Pool errors are client errors: report their kind and message."""
    logger.info("request_rejected", path=request.url.path, error=exc.kind, detail=str(exc))
    return JSONResponse(status_code=400, content={"error": exc.kind, "detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint; also reports whether a pool is configured."""
    return {
        "status": "ok",
        "version": __version__,
        "pool_configured": get_default_pool() is not None,
    }


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - STABLESWAP_HOST: Host to bind to (default: 0.0.0.0)
    - STABLESWAP_PORT: Port to bind to (default: 8000)
    - STABLESWAP_DEBUG: Enable debug/reload mode (default: false)
    - STABLESWAP_POOL_CONFIG: JSON deployment file for the quoted pool
    """
    uvicorn.run(
        "stableswap.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
