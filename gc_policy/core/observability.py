"""
Observability for the GC policy service.

- JSON log lines carrying the request id of the HTTP call that produced them
- Prometheus counters and histograms for HTTP traffic, rule compilation and
  store calls, kept on a registry private to this service
- A middleware tying the two together per request

Usage:
    from gc_policy.core.observability import metrics, store_metrics

    with store_metrics.track("get_gc_policy"):
        policy = await store.get_gc_policy(table_ref, family_id)
"""

import json
import logging
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from fastapi import Request, Response
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

request_logger = logging.getLogger("gc_policy.request")

# ----------------------------------------------------------------------------
# Request ids
# ----------------------------------------------------------------------------

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def generate_request_id() -> str:
    """New random request id (UUID4)."""
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Request id of the current context, or "" outside a request."""
    return request_id_var.get()


def set_correlation_id(request_id: str) -> None:
    """Bind a request id to the current context."""
    request_id_var.set(request_id)


# ----------------------------------------------------------------------------
# Structured logging
# ----------------------------------------------------------------------------

# Attributes every LogRecord has; anything else came in through `extra=`
_STANDARD_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """
    Render each record as one JSON object.

    Keys: timestamp, level, logger, message, source (file/line/function),
    request_id when bound, exception when exc_info is set, and extra for
    whatever the caller passed through `extra=`.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            entry["exception"] = {"type": type(exc).__name__, "message": str(exc)}

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


def configure_structured_logging(level: str = "INFO") -> None:
    """Replace the root logger's handlers with one JSON stream handler."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)


# ----------------------------------------------------------------------------
# Metrics
# ----------------------------------------------------------------------------

_registry = CollectorRegistry()

HTTP_LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
COMPILE_LATENCY_BUCKETS = (0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1)
STORE_LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)


class Metrics:
    """
    Every Prometheus collector the service exports, bound to one registry.

    Tests build their own instance on a fresh CollectorRegistry to read
    values without interference from other tests.
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry

        self.http_requests_total = Counter(
            "http_requests_total",
            "HTTP requests by method, route template and status code",
            ["method", "route", "status_code"],
            registry=registry,
        )
        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "route"],
            buckets=HTTP_LATENCY_BUCKETS,
            registry=registry,
        )

        self.gc_rule_compilations_total = Counter(
            "gc_rule_compilations_total",
            "GC rule trees parsed and compiled, by outcome",
            ["status"],
            registry=registry,
        )
        self.gc_rule_compile_duration_seconds = Histogram(
            "gc_rule_compile_duration_seconds",
            "GC rule parse and compile duration in seconds",
            buckets=COMPILE_LATENCY_BUCKETS,
            registry=registry,
        )

        self.gc_store_operations_total = Counter(
            "gc_store_operations_total",
            "Column-family store calls, by operation and outcome",
            ["operation", "status"],
            registry=registry,
        )
        self.gc_store_operation_duration_seconds = Histogram(
            "gc_store_operation_duration_seconds",
            "Column-family store call duration in seconds",
            ["operation"],
            buckets=STORE_LATENCY_BUCKETS,
            registry=registry,
        )


metrics = Metrics(_registry)


def metrics_endpoint() -> Response:
    """Prometheus text exposition of the service registry."""
    return Response(
        content=generate_latest(_registry),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


# ----------------------------------------------------------------------------
# Request middleware
# ----------------------------------------------------------------------------


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """
    Per-request request id, access log line and HTTP metrics.

    The caller's X-Request-ID header is reused when present and echoed back
    on the response. Requests under `skip_paths` are measured but not logged.
    """

    def __init__(
        self,
        app: ASGIApp,
        metrics_instance: Metrics | None = None,
        skip_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.metrics = metrics_instance or metrics
        self.skip_paths = tuple(skip_paths or ["/api/v1/health", "/metrics"])

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_correlation_id(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            self._observe(request, 500, started, error=e)
            raise

        self._observe(request, response.status_code, started)
        response.headers["X-Request-ID"] = request_id
        return response

    def _observe(
        self,
        request: Request,
        status_code: int,
        started: float,
        error: Exception | None = None,
    ) -> None:
        elapsed = time.perf_counter() - started
        # scope["route"] is only filled in once the router has matched
        route = _route_pattern(request)

        self.metrics.http_requests_total.labels(
            method=request.method, route=route, status_code=status_code
        ).inc()
        self.metrics.http_request_duration_seconds.labels(
            method=request.method, route=route
        ).observe(elapsed)

        fields = {
            "method": request.method,
            "route": route,
            "status_code": status_code,
            "latency_ms": round(elapsed * 1000, 2),
        }
        if error is not None:
            request_logger.error(
                f"{request.method} {route} - {type(error).__name__}: {error}",
                extra=fields,
                exc_info=error,
            )
        elif not route.startswith(self.skip_paths):
            request_logger.info(f"{request.method} {route}", extra=fields)


def _route_pattern(request: Request) -> str:
    """Route template for metric labels, falling back to the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


# ----------------------------------------------------------------------------
# Store call tracking
# ----------------------------------------------------------------------------


class StoreMetricsWrapper:
    """Count and time column-family store calls."""

    def __init__(self, metrics_instance: Metrics | None = None) -> None:
        self.metrics = metrics_instance or metrics

    @contextmanager
    def track(self, operation: str) -> Iterator[None]:
        """
        Record one store call.

        Any exception escaping the block, cancellation included, counts the
        call as an error.

        Args:
            operation: Store method name (e.g. "get_gc_policy")
        """
        started = time.perf_counter()
        status = "error"
        try:
            yield
            status = "success"
        finally:
            self.metrics.gc_store_operation_duration_seconds.labels(
                operation=operation
            ).observe(time.perf_counter() - started)
            self.metrics.gc_store_operations_total.labels(
                operation=operation, status=status
            ).inc()


store_metrics = StoreMetricsWrapper()
