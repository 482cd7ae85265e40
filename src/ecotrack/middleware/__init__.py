"""Middleware registration for the EcoTrack API."""

from fastapi import FastAPI

from ecotrack.config import Settings
from ecotrack.middleware.cors import setup_cors
from ecotrack.middleware.error_handler import setup_error_handlers
from ecotrack.middleware.logging import setup_logging
from ecotrack.middleware.rate_limit import RateLimitMiddleware
from ecotrack.middleware.request_id import RequestIdMiddleware

# Service endpoints, never rate limited
UNLIMITED_PATHS = frozenset({"/health", "/ready", "/version"})


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware.

    Starlette runs middleware in reverse-add order, so CORS is added last to
    wrap 429 responses from the rate limiter.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        write_requests_per_window=settings.rate_limit_write_requests,
        window_seconds=settings.rate_limit_window_seconds,
        exempt_paths=UNLIMITED_PATHS,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
