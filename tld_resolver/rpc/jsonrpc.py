"""
JSON-RPC 2.0 dispatcher
=======================

Features
--------
• Single & batch requests, named & positional params, notifications.
• Structured error mapping (standard codes + resolver errors).
• Async-aware execution; the FastAPI route lives in ``rpc.server``.
• Deterministic responses: {"jsonrpc":"2.0", "id":..., "result":...} or {"error":...}.
"""

from __future__ import annotations

import inspect
import logging
from enum import IntEnum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from tld_resolver.errors import AddressError, IndexOutOfRange, ResolverError, Unauthorized
from tld_resolver.rpc.metrics import observe_call

log = logging.getLogger("tld_resolver.rpc.jsonrpc")

Json = Dict[str, Any]
Params = Union[List[Any], Dict[str, Any]]
CallableLike = Union[Callable[..., Any], Callable[..., Awaitable[Any]]]


class JsonRpcCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    SERVER_ERROR = -32000
    ACCESS_DENIED = -32003
    NOT_FOUND = -32004


class JsonRpcError(Exception):
    code: int = JsonRpcCode.SERVER_ERROR
    message: str = "Server error"

    def __init__(self, message: Optional[str] = None, *, data: Any = None) -> None:
        if message is not None:
            self.message = message
        self.data = data
        super().__init__(self.message)


class ParseError(JsonRpcError):
    code = JsonRpcCode.PARSE_ERROR
    message = "Parse error"


class InvalidRequest(JsonRpcError):
    code = JsonRpcCode.INVALID_REQUEST
    message = "Invalid Request"


class MethodNotFound(JsonRpcError):
    code = JsonRpcCode.METHOD_NOT_FOUND
    message = "Method not found"


class InvalidParams(JsonRpcError):
    code = JsonRpcCode.INVALID_PARAMS
    message = "Invalid params"


# --------------------------------------------------------------------------------------
# Method registry
# --------------------------------------------------------------------------------------


class MethodRegistry:
    """Name → callable registry with decorator sugar. Methods may be sync or async."""

    def __init__(self) -> None:
        self._methods: Dict[str, CallableLike] = {}

    def method(self, name: str) -> Callable[[CallableLike], CallableLike]:
        def deco(fn: CallableLike) -> CallableLike:
            if not isinstance(name, str) or not name:
                raise ValueError("Method name must be non-empty string")
            if name in self._methods:
                raise ValueError(f"Method already registered: {name}")
            self._methods[name] = fn
            log.debug("JSON-RPC register %s → %s", name, getattr(fn, "__qualname__", fn))
            return fn

        return deco

    def register(self, name: str, fn: CallableLike) -> None:
        self.method(name)(fn)

    def get(self, name: str) -> CallableLike:
        fn = self._methods.get(name)
        if fn is None:
            raise MethodNotFound(data={"method": name})
        return fn

    @property
    def names(self) -> List[str]:
        return sorted(self._methods)


# --------------------------------------------------------------------------------------
# Error shaping
# --------------------------------------------------------------------------------------

_RESOLVER_CODES = (
    (Unauthorized, JsonRpcCode.ACCESS_DENIED),
    (IndexOutOfRange, JsonRpcCode.NOT_FOUND),
    (AddressError, JsonRpcCode.INVALID_PARAMS),
)


def error_obj(exc: Exception) -> Json:
    """Convert any exception into a JSON-RPC error object."""
    if isinstance(exc, JsonRpcError):
        err: Json = {"code": int(exc.code), "message": exc.message}
        if exc.data is not None:
            err["data"] = exc.data
        return err

    if isinstance(exc, ResolverError):
        code = JsonRpcCode.SERVER_ERROR
        for cls, mapped in _RESOLVER_CODES:
            if isinstance(exc, cls):
                code = mapped
                break
        return {"code": int(code), "message": exc.message, "data": {"reason": exc.code}}

    if isinstance(exc, (ValueError, TypeError)):
        return {"code": int(JsonRpcCode.INVALID_PARAMS), "message": "Invalid params", "data": str(exc)}

    log.exception("unhandled error in JSON-RPC method", exc_info=exc)
    return {"code": int(JsonRpcCode.INTERNAL_ERROR), "message": "Internal error"}


# --------------------------------------------------------------------------------------
# Core dispatch
# --------------------------------------------------------------------------------------

_NO_ID = object()  # sentinel for notification


def _validate_request_obj(obj: Any) -> Tuple[str, Optional[Params], Any]:
    if not isinstance(obj, dict):
        raise InvalidRequest("Request must be an object")
    if obj.get("jsonrpc") != "2.0":
        raise InvalidRequest("jsonrpc must be '2.0'")
    method = obj.get("method")
    if not isinstance(method, str) or not method:
        raise InvalidRequest("method must be a non-empty string")
    params = obj.get("params")
    if params is not None and not isinstance(params, (list, dict)):
        raise InvalidParams("params, if present, must be array or object")
    if "id" not in obj:
        return method, params, _NO_ID
    req_id = obj["id"]
    if req_id is not None and (isinstance(req_id, bool) or not isinstance(req_id, (str, int, float))):
        raise InvalidRequest("id must be string, number, or null")
    return method, params, req_id


def _bind(fn: CallableLike, params: Optional[Params]) -> inspect.BoundArguments:
    sig = inspect.signature(fn)
    try:
        if params is None:
            return sig.bind()
        if isinstance(params, list):
            return sig.bind(*params)
        return sig.bind(**params)
    except TypeError as exc:
        raise InvalidParams(str(exc)) from exc


async def _maybe_await(x: Any) -> Any:
    if inspect.isawaitable(x):
        return await x
    return x


async def dispatch_one(registry: MethodRegistry, obj: Any) -> Optional[Json]:
    """Dispatch one request object; None for notifications."""
    req_id: Any = obj.get("id", _NO_ID) if isinstance(obj, dict) else None
    timer = None
    try:
        method_name, params, req_id = _validate_request_obj(obj)
        fn = registry.get(method_name)
        timer = observe_call(method_name)
        bound = _bind(fn, params)
        result = await _maybe_await(fn(*bound.args, **bound.kwargs))
        timer.ok()
        if req_id is _NO_ID:
            return None
        return {"jsonrpc": "2.0", "id": req_id, "result": result}
    except Exception as exc:
        if timer is not None:
            code = getattr(exc, "code", "internal")
            timer.error(str(int(code)) if isinstance(code, int) else str(code))
        if req_id is _NO_ID:
            log.debug("error in notification %s: %s", obj.get("method"), exc)
            return None
        return {"jsonrpc": "2.0", "id": req_id, "error": error_obj(exc)}


async def dispatch(registry: MethodRegistry, payload: Any) -> Union[Json, List[Json], None]:
    """Dispatch a parsed JSON payload (single object or batch)."""
    if isinstance(payload, list):
        if not payload:
            return {"jsonrpc": "2.0", "id": None, "error": error_obj(InvalidRequest("empty batch"))}
        results = [await dispatch_one(registry, obj) for obj in payload]
        return [r for r in results if r is not None]
    if isinstance(payload, dict):
        return await dispatch_one(registry, payload)
    return {"jsonrpc": "2.0", "id": None, "error": error_obj(InvalidRequest("payload must be object or array"))}


__all__ = [
    "JsonRpcCode",
    "JsonRpcError",
    "ParseError",
    "InvalidRequest",
    "MethodNotFound",
    "InvalidParams",
    "MethodRegistry",
    "error_obj",
    "dispatch_one",
    "dispatch",
]
