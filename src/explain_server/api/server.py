"""
FastAPI backend server for the explain service.

This module builds the FastAPI application that the browser client calls.
It sets up:
- CORS middleware so the static client can call the API from another origin
- Exception handlers that turn every failure into an ``{"error": ...}`` body
- The explanation service shared by all requests
- All API route endpoints

``create_app`` builds an app from any ``ServerConfig`` (tests pass their
own); the module-level ``app`` is built from the process configuration for
``uvicorn explain_server.api.server:app``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from explain_server import __version__
from explain_server.api.routes import register_routes
from explain_server.config import ServerConfig, config
from explain_server.explain.errors import ExplainError
from explain_server.explain.service import ExplanationService

logger = logging.getLogger(__name__)


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


async def _explain_error_handler(_request: Request, exc: ExplainError) -> JSONResponse:
    """Map ExplainError subclasses to their status and public error string."""
    if exc.status_code >= 500:
        logger.error("explain request failed: %s", exc.error)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error})


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 with the client's error shape."""
    errors = exc.errors()
    message = errors[0].get("msg", "invalid request") if errors else "invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def _http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (404, 405) in the same ``{"error": ...}`` shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=exc.headers,
    )


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500 so clients never see a plain-text error page."""
    logger.exception("unhandled error in explain request")
    return JSONResponse(status_code=500, content={"error": str(exc) or "unknown error"})


# ============================================================================
# APPLICATION FACTORY
# ============================================================================


def create_app(
    cfg: ServerConfig | None = None,
    *,
    service: ExplanationService | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        cfg: Configuration to build from; defaults to the process config.
        service: Pre-built service (tests inject a mock); built from ``cfg``
            when omitted.

    Returns:
        The configured FastAPI app.
    """
    cfg = cfg or config
    service = service or ExplanationService.from_config(cfg)

    app = FastAPI(title="Explain Server", version=__version__)

    # The client is a static page served from another origin. With "*"
    # origins, credentials must stay off (browsers reject the combination).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.security.cors_origins,
        allow_credentials=False,
        allow_methods=cfg.security.cors_allow_methods,
        allow_headers=cfg.security.cors_allow_headers,
    )

    app.add_exception_handler(ExplainError, _explain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    register_routes(app, service)
    return app


# Application used by `uvicorn explain_server.api.server:app`
app = create_app()


# ============================================================================
# SERVER STARTUP
# ============================================================================


def start_server(host: str | None = None, port: int | None = None) -> None:
    """
    Run the API with uvicorn.

    Args:
        host: Interface to bind; defaults to ``config.server.host``.
        port: Port to bind; defaults to ``config.server.port``.
    """
    import uvicorn

    uvicorn.run(
        app,
        host=host or config.server.host,
        port=port or config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    start_server()
