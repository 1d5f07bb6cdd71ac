"""Middleware configuration for FastAPI application."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING
import uuid

from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from docstore_service.core.settings import get_settings
from docstore_service.infra.logging.context import clear_log_context, set_log_context
from docstore_service.infra.metrics.prometheus import (
    http_request_duration_seconds,
    http_requests_total,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import FastAPI, Request, Response
    from starlette.types import ASGIApp

    from docstore_service.core.settings import Settings

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to all requests for tracing.

    The ID is taken from the ``X-Request-ID`` header or generated, stored on
    ``request.state.request_id``, put into the log context for the duration
    of the request and echoed in the response.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        set_log_context(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            clear_log_context()
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request counts and durations and add ``X-Process-Time``.

    Route path templates are used as the endpoint label to keep
    cardinality low. Requests slower than ``LOG_SLOW_REQUEST_THRESHOLD``
    seconds are logged at WARNING.
    """

    def __init__(self, app: ASGIApp, slow_request_threshold: float = 1.0) -> None:
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        method = request.method
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Process-Time"] = f"{time.perf_counter() - start_time:.6f}"
            return response
        finally:
            duration = time.perf_counter() - start_time
            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)

            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)
            http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()

            if duration > self.slow_request_threshold:
                logger.warning(
                    "Slow request",
                    extra={
                        "method": method,
                        "path": request.url.path,
                        "status_code": status_code,
                        "duration": round(duration, 4),
                    },
                )


def configure_middleware(app: FastAPI, settings: Settings | None = None) -> None:
    """Configure middleware for the application.

    Starlette runs middleware in reverse order of registration, so the
    request ID is assigned before metrics are recorded.

    Args:
        app: FastAPI application instance.
        settings: Settings providing CORS and slow-request configuration.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    log_settings = settings.logging

    cors_origins = app_settings.cors_origins or ["*"]
    logger.info("Configuring CORS", extra={"origins": cors_origins})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=app_settings.cors_allow_credentials,
        allow_methods=app_settings.cors_allow_methods,
        allow_headers=app_settings.cors_allow_headers,
        max_age=3600,
    )
    app.add_middleware(
        MetricsMiddleware,
        slow_request_threshold=log_settings.slow_request_threshold,
    )
    app.add_middleware(RequestIDMiddleware)
