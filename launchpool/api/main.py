"""FastAPI application for launchpad pool quotes.

Quotes are previews computed from a fresh pool snapshot per request. The
pool contract enforces the final amount through minAmountOut / maxAmountIn.
"""

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from launchpool import __version__, config
from launchpool.api.endpoints import router
from launchpool.models.api import ErrorResponse
from launchpool.pool.errors import PoolError, PoolNotFound, PoolSourceError

logger = structlog.get_logger()

# Maximum request body size (64 KB); quote requests are tiny
MAX_REQUEST_SIZE = 64 * 1024

app = FastAPI(
    title="Launchpool",
    description="Weighted pool pricing and swap quotes for a memecoin launchpad",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


def status_for(error: PoolError) -> int:
    """HTTP status for a pool error: 404 unknown pool, 502 chain read, 422 otherwise."""
    if isinstance(error, PoolNotFound):
        return 404
    if isinstance(error, PoolSourceError):
        return 502
    return 422


@app.exception_handler(PoolError)
async def handle_pool_error(request: Request, exc: PoolError) -> JSONResponse:
    status = status_for(exc)
    logger.warning(
        "request_rejected",
        path=request.url.path,
        error=exc.code,
        detail=str(exc),
        status=status,
    )
    body = ErrorResponse(error=exc.code, detail=str(exc), message=exc.user_message)
    return JSONResponse(status_code=status, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "rpc_configured": config.RPC_URL is not None}


def run() -> None:
    """Run the quote API server.

    Configuration via environment variables:
    - LAUNCHPOOL_HOST: Host to bind to (default: 0.0.0.0)
    - LAUNCHPOOL_PORT: Port to bind to (default: 8000)
    - LAUNCHPOOL_DEBUG: Enable debug/reload mode (default: false)
    - LAUNCHPOOL_LOG_LEVEL: Log level (default: INFO)
    """
    config.configure_logging()
    uvicorn.run(
        "launchpool.api.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.DEBUG,
    )


if __name__ == "__main__":
    run()
