from __future__ import annotations

"""
Structured errors for the resolver layer.

Only two failure classes exist on the contract surface:

- ``Unauthorized``     a mutator was called by someone other than the authority
- ``IndexOutOfRange``  a factory removal pointed past the end of the list

Read paths never raise on a missing binding; they return the zero address or
an empty string. The remaining classes cover the edges around the core
(address parsing, live-chain adapters, snapshot files).
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass
class ResolverError(Exception):
    """
    Base error. Carries a short machine-readable ``code``, a human message and
    an optional ``context`` mapping for RPC wiring.

        ResolverError("message")
        ResolverError("message", code="some_code", context={...})
    """

    code: str
    message: str
    context: Dict[str, Any]

    default_code = "resolver_error"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        object.__setattr__(self, "code", code or self.default_code)
        object.__setattr__(self, "message", str(message))
        object.__setattr__(self, "context", dict(context or {}))

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


class Unauthorized(ResolverError):
    default_code = "unauthorized"


class IndexOutOfRange(ResolverError):
    default_code = "index_out_of_range"


class AddressError(ResolverError):
    default_code = "bad_address"


class AdapterError(ResolverError):
    default_code = "adapter_error"


class SnapshotError(ResolverError):
    default_code = "bad_snapshot"


def require(
    condition: bool,
    message: Any = "require failed",
    *,
    exc: type = ResolverError,
    context: Optional[Mapping[str, Any]] = None,
) -> None:
    """
    Raise ``exc(message)`` unless ``condition`` holds.

        require(caller == owner, "Sender not TLD owner", exc=Unauthorized)
    """
    if condition:
        return
    if isinstance(message, (bytes, bytearray)):
        message = message.decode("utf-8", errors="replace")
    raise exc(str(message), context=context)


__all__ = [
    "ResolverError",
    "Unauthorized",
    "IndexOutOfRange",
    "AddressError",
    "AdapterError",
    "SnapshotError",
    "require",
]
