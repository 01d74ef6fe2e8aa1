"""FastAPI application serving uniroute quotes.

Note: Rate limiting is intentionally not implemented at the application level.
It should be handled at the infrastructure layer (reverse proxy / load balancer).
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from uniroute import __version__
from uniroute.api.endpoints import router
from uniroute.errors import RouterError

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("UNIROUTE_HOST", "0.0.0.0")
PORT = int(os.environ.get("UNIROUTE_PORT", "8000"))
DEBUG = os.environ.get("UNIROUTE_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

app = FastAPI(
    title="uniroute",
    description="Off-chain trade routing and liquidity quoting for Uniswap-style exchanges",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(RouterError)
async def router_error_handler(request: Request, exc: RouterError) -> JSONResponse:
    """Map routing errors to 400 with a stable machine-readable code."""
    logger.warning("request_rejected", path=request.url.path, code=exc.code.value, error=exc.message)
    return JSONResponse(status_code=400, content=exc.to_dict())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def configure_logging(debug: bool = DEBUG) -> None:
    """Configure structlog for the server process."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
        ]
    )


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - UNIROUTE_HOST: Host to bind to (default: 0.0.0.0)
    - UNIROUTE_PORT: Port to bind to (default: 8000)
    - UNIROUTE_DEBUG: Enable debug/reload mode and console logs (default: false)
    """
    configure_logging()
    uvicorn.run(
        "uniroute.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
