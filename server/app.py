"""FastAPI application factory for the relay."""

from __future__ import annotations

import json
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from relay.adapters.geo import HeaderGeoLookup
from relay.adapters.ratelimit import FixedWindowRateLimiter
from relay.adapters.renderer import RendererClient
from relay.adapters.webhook import WebhookChannel
from relay.services import ContentFormatter, FailureReporter, RelayPipeline, TaskScheduler
from relay.types import DeliveryChannel, GeoLookup, RateLimiter, RelayError, Renderer

from .config import Settings, get_settings
from .logging_config import configure_logging, logger
from .routes import api_router

UNEXPECTED_ERROR = "An unexpected error occurred."


# Register global exception handlers for consistent error responses across the API
def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers for relay, 422, HTTP, and 500 errors."""

    @app.exception_handler(RelayError)
    async def _relay_exception_handler(request: Request, exc: RelayError):
        logger.info(
            "relay error",
            extra={"error": type(exc).__name__, "detail": exc.detail, "path": str(request.url.path)},
        )
        return JSONResponse({"ok": False, "error": exc.public_message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.debug("validation error", extra={"errors": exc.errors(), "path": str(request.url)})
        return JSONResponse(
            {"ok": False, "error": "Invalid request", "detail": jsonable_encoder(exc.errors())},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        logger.debug(
            "http error",
            extra={"detail": exc.detail, "status": exc.status_code, "path": str(request.url)},
        )
        detail = exc.detail
        if not isinstance(detail, str):
            detail = json.dumps(detail)
        return JSONResponse({"ok": False, "error": detail}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": str(request.url)})
        reporter: Optional[FailureReporter] = getattr(request.app.state, "reporter", None)
        if reporter is not None:
            await reporter.report(request.url.path, exc)
        return JSONResponse(
            {"ok": False, "error": UNEXPECTED_ERROR},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def register_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def _log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    logger.info(
        "Starting relay server",
        extra={"version": settings.app_version, "mode": settings.mode.value},
    )
    yield
    logger.info("Shutting down relay server")
    await app.state.scheduler.drain()
    logger.info("Relay server shutdown complete")


def create_app(
    settings: Optional[Settings] = None,
    *,
    channel: Optional[DeliveryChannel] = None,
    renderer: Optional[Renderer] = None,
    rate_limiter: Optional[RateLimiter] = None,
    geo_lookup: Optional[GeoLookup] = None,
) -> FastAPI:
    """Build the relay application.

    Settings are validated here, so missing required configuration fails
    at startup. Collaborators default to the HTTP-backed implementations
    and can be replaced, e.g. to plug in a rate limiter backed by a shared
    store.

    Raises:
        ConfigurationError: a required setting is missing or malformed.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    settings.validate_required()

    limit, period = settings.rate_limit
    channel = channel or WebhookChannel(settings)
    renderer = renderer or RendererClient(settings)
    formatter = ContentFormatter(settings.mention)
    reporter = FailureReporter(channel, formatter)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.resolved_docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.channel = channel
    app.state.reporter = reporter
    app.state.rate_limiter = rate_limiter or FixedWindowRateLimiter(limit, period)
    app.state.geo_lookup = geo_lookup or HeaderGeoLookup(settings)
    app.state.scheduler = TaskScheduler()
    app.state.pipeline = RelayPipeline(channel, renderer, formatter, reporter, mode=settings.mode)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_request_logging(app)

    # Register exception handlers
    register_exception_handlers(app)

    # Include aggregated router
    app.include_router(api_router)

    return app


__all__ = ["create_app", "register_exception_handlers"]
