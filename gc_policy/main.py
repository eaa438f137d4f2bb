"""
FastAPI application for the GC policy service.

Run locally with `dev` (uvicorn with reload) or any ASGI server pointed at
`gc_policy.main:app`.
"""

import hmac
import logging

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from gc_policy import __version__
from gc_policy.api.routes.gc_policies import router as gc_policies_router
from gc_policy.api.routes.health import router as health_router
from gc_policy.core.config import settings
from gc_policy.core.errors import GCPolicyError, get_status_code
from gc_policy.core.observability import (
    ObservabilityMiddleware,
    configure_structured_logging,
    get_request_id,
    metrics_endpoint,
)

if settings.observability_structured_logs:
    configure_structured_logging(settings.app_log_level)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


async def handle_gc_policy_error(request: Request, exc: GCPolicyError) -> JSONResponse:
    """Domain error -> `{"error", "message", "details"}` with its mapped status."""
    status_code = get_status_code(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"{type(exc).__name__}: {exc.message}",
        extra={"details": exc.details, "path": request.url.path, "request_id": get_request_id()},
    )

    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "message": exc.message, "details": exc.details},
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Anything else is logged with its traceback and hidden behind a generic 500."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra={"path": request.url.path, "request_id": get_request_id()},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "InternalServerError",
            "message": "An unexpected error occurred",
            "details": {},
        },
    )


async def serve_metrics(request: Request) -> Response:
    """
    Prometheus scrape target.

    When METRICS_TOKEN is configured the X-Metrics-Token header must match.
    """
    expected = settings.metrics_token
    if expected:
        presented = request.headers.get("X-Metrics-Token") or ""
        if not hmac.compare_digest(presented, expected):
            logger.warning(
                "Rejected /metrics request with missing or wrong token",
                extra={"security_event": True, "event_type": "METRICS_ACCESS_DENIED"},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Invalid metrics token"
            )
    return metrics_endpoint()


def create_app() -> FastAPI:
    """Build the application: middleware, error handlers, routers and /metrics."""
    app = FastAPI(
        title="GC Policy Service",
        description="Column-family garbage-collection rule compiler and policy manager",
        version=__version__,
    )

    app.add_exception_handler(GCPolicyError, handle_gc_policy_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(gc_policies_router, prefix=API_PREFIX)

    if settings.observability_enabled:
        app.add_middleware(ObservabilityMiddleware)
        app.add_route("/metrics", serve_metrics)

    return app


app = create_app()
