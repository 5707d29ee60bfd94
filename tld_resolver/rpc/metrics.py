"""
Prometheus series for the resolver service.

``create_app`` wires both halves: ``http_metrics_middleware`` times every
request and ``mount_metrics`` serves the registry at ``/metrics``. The
dispatcher brackets each call to a *registered* method:

    timer = observe_call("resolver.getDefaultDomains")
    ...                       # bind + run the handler
    timer.ok()                # or timer.error("bad_address") / timer.error("-32602")

Series
------
tld_resolver_http_requests_total{method,path,status}
tld_resolver_http_request_duration_seconds{method,path}
tld_resolver_jsonrpc_requests_total{method,status,code}
    ``code`` is "0" on success, otherwise the ResolverError reason
    (``unauthorized``, ``bad_address``, ...) or the JSON-RPC error number.
tld_resolver_jsonrpc_request_duration_seconds{method}

Unknown method names never become labels; ``path`` is limited to the
service's own routes.
"""

from __future__ import annotations

import time

from fastapi import FastAPI, Request
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

ROUTES = frozenset({"/rpc", "/metrics", "/healthz", "/version"})

HTTP_REQUESTS = Counter(
    "tld_resolver_http_requests_total",
    "HTTP requests served, by method, route and status.",
    ["method", "path", "status"],
    registry=REGISTRY,
)
HTTP_LATENCY = Histogram(
    "tld_resolver_http_request_duration_seconds",
    "HTTP request duration by method and route.",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
    registry=REGISTRY,
)

RPC_CALLS = Counter(
    "tld_resolver_jsonrpc_requests_total",
    "Resolver JSON-RPC calls by method, outcome and error code.",
    ["method", "status", "code"],
    registry=REGISTRY,
)
RPC_LATENCY = Histogram(
    "tld_resolver_jsonrpc_request_duration_seconds",
    "Resolver JSON-RPC call latency by method.",
    ["method"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30),
    registry=REGISTRY,
)


def _route_label(path: str) -> str:
    return path if path in ROUTES else "/other"


class _HttpMetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        method = request.method.upper()
        route = _route_label(request.url.path)
        start = time.perf_counter()
        status = "500"
        try:
            response: Response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            HTTP_REQUESTS.labels(method=method, path=route, status=status).inc()
            HTTP_LATENCY.labels(method=method, path=route).observe(time.perf_counter() - start)


http_metrics_middleware = _HttpMetricsMiddleware


class CallTimer:
    """Records one resolver call; only the first ok()/error() counts."""

    __slots__ = ("method", "_start", "_done")

    def __init__(self, method: str) -> None:
        self.method = method
        self._start = time.perf_counter()
        self._done = False

    def _record(self, status: str, code: str) -> None:
        if self._done:
            return
        self._done = True
        RPC_CALLS.labels(method=self.method, status=status, code=code).inc()
        RPC_LATENCY.labels(method=self.method).observe(time.perf_counter() - self._start)

    def ok(self) -> None:
        self._record("ok", "0")

    def error(self, code: str = "internal") -> None:
        self._record("error", code)


def observe_call(method: str) -> CallTimer:
    return CallTimer(method)


def mount_metrics(app: FastAPI, path: str = "/metrics") -> None:
    @app.get(path, include_in_schema=False)
    async def metrics() -> Response:
        return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


__all__ = ["CallTimer", "http_metrics_middleware", "mount_metrics", "observe_call"]
