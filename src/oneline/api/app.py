"""
FastAPI Application Factory.

This module builds the OneLine HTTP application:

- **Middleware**: CORS so a browser frontend on another origin can call us.
- **Exception Handling**: every error becomes structured JSON; transport,
  configuration and access errors get their own status codes.
- **Routing**: the timeline router plus a `/health` probe.

`create_app()` returns a fresh instance each call, so tests can build an app,
override its dependencies and throw it away.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from oneline import __version__
from oneline.api.routers import timeline
from oneline.core.config import AccessDenied, ConfigurationError
from oneline.core.settings import get_logger, load_settings
from oneline.llm.client import TransportError

logger = get_logger("oneline.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = load_settings()
    logger.info(
        "OneLine API starting (env=%s, user_config=%s, password=%s)",
        settings.environment,
        settings.allow_user_config,
        "on" if settings.access_password else "off",
    )
    yield
    logger.info("OneLine API shutting down")


def _error(status_code: int, error: str, exc: Exception, request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": str(exc), "path": request.url.path},
    )


def create_app() -> FastAPI:
    """
    Construct and configure the OneLine FastAPI application.

    Returns
    -------
    FastAPI
        The configured ASGI application ready to be served by Uvicorn.
    """
    app = FastAPI(
        title="OneLine API",
        description="Timelines of news events, generated by an LLM",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return _error(500, "Internal Server Error", exc, request)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return _error(400, "Bad Request", exc, request)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        return _error(400, "API Not Configured", exc, request)

    @app.exception_handler(AccessDenied)
    async def access_denied_handler(request: Request, exc: AccessDenied) -> JSONResponse:
        return _error(401, "Unauthorized", exc, request)

    @app.exception_handler(TransportError)
    async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
        logger.warning("Upstream model call failed: %s", exc)
        return _error(502, "Upstream Error", exc, request)

    app.include_router(timeline.router)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        """Simple liveness probe."""
        return {
            "status": "ok",
            "environment": load_settings().environment,
            "version": __version__,
        }

    return app


__all__ = ["create_app"]
