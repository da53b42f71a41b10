"""FastAPI application for the exchange.

Trusted callers only. The service does no authentication: the acting
account (trader, provider, or the caller of the fee endpoint) is taken from
the request body as given. Any client that can reach the service can act as
the pool operator or spend any account's balance. Expose it only behind a
layer that authenticates callers and fills in those fields itself.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dex import __version__
from dex.api.endpoints import router
from dex.api.schemas import ErrorResponse
from dex.errors import DexError

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("DEX_HOST", "0.0.0.0")
PORT = int(os.environ.get("DEX_PORT", "8000"))
DEBUG = os.environ.get("DEX_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

# HTTP status per error category
STATUS_BY_CATEGORY = {
    "validation": 400,
    "entitlement": 403,
    "economic_guard": 409,
    "structural": 409,
}

app = FastAPI(
    title="Multi-token DEX",
    description="Multi-token liquidity pools with fee-bearing swaps and multi-hop routing",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(DexError)
async def dex_error_handler(request: Request, exc: DexError) -> JSONResponse:
    """Map exchange rejections to 400/403/409 with a uniform body."""
    status_code = STATUS_BY_CATEGORY.get(exc.category, 400)
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        category=exc.category,
        status_code=status_code,
    )
    body = ErrorResponse(error=type(exc).__name__, detail=str(exc), category=exc.category)
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the exchange API server.

    Configuration via environment variables:
    - DEX_HOST: Host to bind to (default: 0.0.0.0)
    - DEX_PORT: Port to bind to (default: 8000)
    - DEX_DEBUG: Enable debug/reload mode (default: false)
    - DEX_OWNER: Operator account of created pools
    """
    uvicorn.run(
        "dex.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
