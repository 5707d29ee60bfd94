"""
FastAPI app serving the resolver over JSON-RPC.

Routes:
  POST /rpc       JSON-RPC 2.0 (single or batch)
  GET  /healthz   liveness
  GET  /version   package version
  GET  /metrics   Prometheus metrics
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from tld_resolver.config import ResolverConfig, load_config
from tld_resolver.resolver import CrossFactoryResolver
from tld_resolver.rpc.jsonrpc import ParseError, dispatch, error_obj
from tld_resolver.rpc.methods import build_registry
from tld_resolver.rpc.metrics import http_metrics_middleware, mount_metrics
from tld_resolver.version import __version__, version_with_git

log = logging.getLogger("tld_resolver.rpc.server")


def create_app(resolver: CrossFactoryResolver, cfg: Optional[ResolverConfig] = None) -> FastAPI:
    cfg = cfg or load_config()

    # Basic logging if caller hasn't configured it
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=getattr(logging, cfg.log_level.upper(), logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    registry = build_registry(resolver)
    app = FastAPI(
        title="TLD Resolver JSON-RPC",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.resolver = resolver
    app.state.registry = registry
    app.add_middleware(http_metrics_middleware)
    mount_metrics(app)

    @app.post("/rpc")
    async def rpc_endpoint(request: Request) -> Response:
        body = await request.body()
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            err = {"jsonrpc": "2.0", "id": None, "error": error_obj(ParseError())}
            return JSONResponse(err)
        result = await dispatch(registry, payload)
        if result is None or result == []:
            return Response(status_code=204)
        return Response(content=json.dumps(result, separators=(",", ":")), media_type="application/json")

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"ok": True}

    @app.get("/version")
    async def version() -> dict:
        return {"version": __version__, "build": version_with_git()}

    log.info("resolver rpc app ready with %d methods", len(registry.names))
    return app


__all__ = ["create_app"]
