"""
tld_resolver.config — runtime configuration for the resolver tooling.

Configuration precedence:
  1) Environment variables (TLD_RESOLVER_*)
  2) Hardcoded safe defaults below

Environment variables:
  TLD_RESOLVER_RPC_URL=http://127.0.0.1:8545
  TLD_RESOLVER_ADDRESS=0x...                 (on-chain resolver contract)
  TLD_RESOLVER_CHAIN_ID=81457
  TLD_RESOLVER_JOIN_POLICY=reference|compact   (unset = snapshot value, else reference)
  TLD_RESOLVER_RPC_TIMEOUT=10
  TLD_RESOLVER_STATE_PATH=~/.tld_resolver/state.db   (empty = in-memory)
  TLD_RESOLVER_HOST=127.0.0.1
  TLD_RESOLVER_PORT=8645
  TLD_RESOLVER_LOG_LEVEL=INFO

This module has no external deps (no dotenv). Use your process manager to
inject env.

Usage:
    from tld_resolver.config import load_config
    cfg = load_config()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_CHAIN_ID = 81457
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8645


class JoinPolicy(str, Enum):
    """
    Separator handling for the "all default domains" string.

    REFERENCE  omit the separator only after an entry at the last raw
               enumeration position; a skipped final entry leaves a trailing
               space behind, exactly like the deployed resolver.
    COMPACT    separators only between included entries.
    """

    REFERENCE = "reference"
    COMPACT = "compact"


# ----------------------------- helpers ---------------------------------------


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        v = int(raw.strip(), 0)
    except ValueError:
        return default
    return max(min_v, min(max_v, v))


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        v = float(raw.strip())
    except ValueError:
        return default
    return v if v > 0 else default


def _env_join_policy(name: str) -> Optional[JoinPolicy]:
    """None when unset or unrecognized, so a snapshot or the resolver default decides."""
    raw = _env(name)
    if raw is None or not raw.strip():
        return None
    try:
        return JoinPolicy(raw.strip().lower())
    except ValueError:
        return None


def _env_path(name: str) -> Optional[Path]:
    raw = _env(name)
    if not raw or not raw.strip():
        return None
    return Path(raw.strip()).expanduser()


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class ResolverConfig:
    rpc_url: str
    resolver_address: str
    chain_id: int
    join_policy: Optional[JoinPolicy]
    rpc_timeout: float
    state_path: Optional[Path]
    host: str
    port: int
    log_level: str

    def with_overrides(self, **changes: Any) -> "ResolverConfig":
        """Return a copy with non-None overrides applied (CLI flags)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def as_dict(self) -> Dict[str, Any]:
        return {
            "rpc_url": self.rpc_url,
            "resolver_address": self.resolver_address,
            "chain_id": self.chain_id,
            "join_policy": self.join_policy.value if self.join_policy else None,
            "rpc_timeout": self.rpc_timeout,
            "state_path": str(self.state_path) if self.state_path else None,
            "host": self.host,
            "port": self.port,
            "log_level": self.log_level,
        }


def build_config() -> ResolverConfig:
    """Build a fresh ResolverConfig from the current environment."""
    return ResolverConfig(
        rpc_url=(_env("TLD_RESOLVER_RPC_URL", DEFAULT_RPC_URL) or DEFAULT_RPC_URL).strip(),
        resolver_address=(_env("TLD_RESOLVER_ADDRESS", "") or "").strip(),
        chain_id=_env_int("TLD_RESOLVER_CHAIN_ID", DEFAULT_CHAIN_ID, min_v=1, max_v=2**63 - 1),
        join_policy=_env_join_policy("TLD_RESOLVER_JOIN_POLICY"),
        rpc_timeout=_env_float("TLD_RESOLVER_RPC_TIMEOUT", 10.0),
        state_path=_env_path("TLD_RESOLVER_STATE_PATH"),
        host=(_env("TLD_RESOLVER_HOST", DEFAULT_HOST) or DEFAULT_HOST).strip(),
        port=_env_int("TLD_RESOLVER_PORT", DEFAULT_PORT, min_v=0, max_v=65535),
        log_level=(_env("TLD_RESOLVER_LOG_LEVEL", "INFO") or "INFO").strip().upper(),
    )


@lru_cache(maxsize=1)
def load_config() -> ResolverConfig:
    """
    Cached accessor. Tests that tweak env should call ``load_config.cache_clear()``
    or use ``build_config()`` directly.
    """
    return build_config()


__all__ = [
    "JoinPolicy",
    "ResolverConfig",
    "build_config",
    "load_config",
    "DEFAULT_RPC_URL",
    "DEFAULT_CHAIN_ID",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
]
