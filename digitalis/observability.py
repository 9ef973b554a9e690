from __future__ import annotations

import logging
import sys
import time
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

REQUEST_COUNT = Counter(
    "digitalis_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "digitalis_http_request_duration_seconds",
    "HTTP request latency (seconds)",
    ["method", "path"],
)
MEDIATOR_REQUEST_COUNT = Counter(
    "digitalis_mediator_requests_total",
    "Requests dispatched through the mediator",
    ["request_shape", "outcome"],
)
MEDIATOR_REQUEST_LATENCY = Histogram(
    "digitalis_mediator_request_duration_seconds",
    "Mediator pipeline latency (seconds)",
    ["request_shape"],
)
ALLOWED_HTTP_METHOD_LABELS = {"GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"}
MAX_PATH_LABEL_LENGTH = 96

logger = logging.getLogger("digitalis.api")


def metric_method_label(method: str | None) -> str:
    normalized = (method or "").upper()
    if normalized in ALLOWED_HTTP_METHOD_LABELS:
        return normalized
    return "OTHER"


def metric_path_label(request: Request) -> str:
    route = request.scope.get("route")
    route_path = getattr(route, "path", None)
    if not route_path:
        return "/_unmatched"
    if len(route_path) > MAX_PATH_LABEL_LENGTH:
        return "/_label_too_long"
    return str(route_path)


def metric_status_label(status_code: int) -> str:
    if 100 <= int(status_code) <= 599:
        return str(int(status_code))
    return "000"


def build_request_log_payload(
    *,
    request_id: str,
    method: str,
    path: str,
    status_code: int,
    elapsed_seconds: float,
    client_ip: str | None,
) -> dict[str, str | int | float | None]:
    return {
        "request_id": request_id,
        "method": method,
        "path": path,
        "status_code": int(status_code),
        "duration_ms": round(elapsed_seconds * 1000, 2),
        "client_ip": client_ip,
    }


def observe_mediator_request(*, shape: str, outcome: str, elapsed_seconds: float) -> None:
    MEDIATOR_REQUEST_COUNT.labels(shape, outcome).inc()
    MEDIATOR_REQUEST_LATENCY.labels(shape).observe(elapsed_seconds)


def _observe_request_metrics(*, method: str, path: str, status_code: int, elapsed_seconds: float) -> None:
    method_label = metric_method_label(method)
    REQUEST_COUNT.labels(method_label, path, metric_status_label(status_code)).inc()
    REQUEST_LATENCY.labels(method_label, path).observe(elapsed_seconds)


def register_observability(api: FastAPI, *, metrics_dependencies: list[Any] | None = None) -> None:
    @api.middleware("http")
    async def request_observability(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()
        client_ip = request.client.host if request.client else None
        response: Response | None = None

        try:
            response = await call_next(request)
        finally:
            elapsed = time.perf_counter() - started
            path = metric_path_label(request)
            # Anything still raised here escaped the boundary translator.
            escaped = sys.exc_info()[1]
            status_code = 500 if escaped is not None or response is None else int(response.status_code)
            _observe_request_metrics(method=request.method, path=path, status_code=status_code, elapsed_seconds=elapsed)
            log_payload = build_request_log_payload(
                request_id=request_id,
                method=request.method,
                path=path,
                status_code=status_code,
                elapsed_seconds=elapsed,
                client_ip=client_ip,
            )
            if escaped is not None:
                logger.exception("request_failed", extra=log_payload)
            elif status_code >= 500:
                logger.error("request_completed", extra=log_payload)
            elif status_code >= 400:
                logger.warning("request_completed", extra=log_payload)
            else:
                logger.info("request_completed", extra=log_payload)
            if response is not None:
                response.headers["X-Request-Id"] = request_id

        assert response is not None
        return response

    @api.get("/metrics", tags=["system"], include_in_schema=False, dependencies=metrics_dependencies or [])
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
