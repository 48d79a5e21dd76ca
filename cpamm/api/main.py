"""FastAPI application exposing exchanges over HTTP.

The service is a local development chain: requests name their sender instead
of carrying signatures.
"""

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cpamm import __version__
from cpamm.api.endpoints import router
from cpamm.chain.chain import Chain
from cpamm.config import load_config
from cpamm.errors import CpammError, ExchangeAlreadyExists, ExchangeNotFound
from cpamm.exchange.factory import Factory
from cpamm.logging_config import configure_logging
from cpamm.models.api import ErrorResponse
from cpamm.safe_int import SafeIntError

logger = structlog.get_logger()

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), error=type(exc).__name__).model_dump(),
    )


async def _not_found(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(404, exc)


async def _conflict(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(409, exc)


async def _rejected(request: Request, exc: Exception) -> JSONResponse:
    logger.info("request_rejected", path=request.url.path, error=type(exc).__name__)
    return _error_response(400, exc)


async def _unprocessable(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(422, exc)


def create_app(factory: Factory | None = None) -> FastAPI:
    """Build the application around a factory (a fresh chain if none is given)."""
    app = FastAPI(
        title="cpamm",
        description="Constant-product native-coin/token exchanges",
        version=__version__,
    )
    app.state.factory = factory if factory is not None else Factory(Chain())

    @app.middleware("http")
    async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
        """Reject requests with body larger than MAX_REQUEST_SIZE."""
        content_length = request.headers.get("content-length")
        if content_length and int(content_length) > MAX_REQUEST_SIZE:
            return JSONResponse(status_code=413, content={"detail": "Request too large"})
        return await call_next(request)

    app.add_exception_handler(ExchangeNotFound, _not_found)
    app.add_exception_handler(ExchangeAlreadyExists, _conflict)
    app.add_exception_handler(CpammError, _rejected)
    app.add_exception_handler(SafeIntError, _unprocessable)
    # Amount range checks inside the exchange
    app.add_exception_handler(ValueError, _unprocessable)

    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, object]:
        """Health check endpoint."""
        return {"status": "ok", "exchanges": len(app.state.factory)}

    return app


app = create_app()


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - CPAMM_HOST: Host to bind to (default: 0.0.0.0)
    - CPAMM_PORT: Port to bind to (default: 8000)
    - CPAMM_DEBUG: Enable debug/reload mode (default: false)
    - CPAMM_LOG_LEVEL: Minimum log level (default: info)
    - CPAMM_LOG_JSON: JSON log lines (default: false)
    """
    config = load_config()
    configure_logging(config.log_level, json=config.log_json)
    uvicorn.run(
        "cpamm.api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
    )


if __name__ == "__main__":
    run()
