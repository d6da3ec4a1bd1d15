from __future__ import annotations

"""Prometheus metrics for the debate gateway.

Adds an HTTP middleware that records request latency per method/path/status
and a counter of debate turns by action, response mode and outcome.
"""

import time
from typing import Callable, Awaitable

from prometheus_client import Counter, Histogram
from starlette.requests import Request
from starlette.responses import Response

# Histogram buckets chosen for web latencies (seconds). Streaming responses
# are observed when headers are sent, not when the stream closes.
REQUEST_LATENCY = Histogram(
    "adversary_request_latency_seconds",
    "HTTP request latency in seconds",
    labelnames=("method", "path", "status"),
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

DEBATE_REQUESTS = Counter(
    "adversary_debate_requests_total",
    "Debate turns handled by the gateway",
    labelnames=("action", "mode", "outcome"),
)


def record_debate(action: str, mode: str, outcome: str) -> None:
    try:
        DEBATE_REQUESTS.labels(action=action, mode=mode, outcome=outcome).inc()
    except Exception:
        # Never fail a request because of metrics
        pass


def sanitize_path(path: str) -> str:
    """Reduce a request path to a coarse label (e.g. ``/api/debate`` -> ``/api``)."""
    if not path:
        return "/"
    segs = path.split("?")[0].split("/")
    if len(segs) > 1:
        return "/" + segs[1]
    return path


def metrics_middleware_factory() -> Callable[[Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]]:
    async def middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        if request.url.path.endswith("/metrics"):
            return await call_next(request)
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        try:
            REQUEST_LATENCY.labels(
                method=request.method,
                path=sanitize_path(request.url.path),
                status=str(response.status_code),
            ).observe(elapsed)
        except Exception:
            pass
        return response

    return middleware
