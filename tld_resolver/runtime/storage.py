"""
tld_resolver.runtime.storage — deterministic key/value storage for contracts.

Design goals
------------
- Deterministic: plain (key, value) bytes with no wall-clock or I/O in the
  contract layer.
- Simple default: in-process memory backend for local runs & tests.
- Pluggable: a tiny backend interface so the host can swap in a SQLite file
  (or anything else with the same four methods plus ``atomic()``).
- Atomic mutators: ``atomic()`` wraps a multi-write state transition so a
  failure part-way leaves storage exactly as it was.

Contract-facing API (``Storage``)
---------------------------------
- get / set / delete / exists                raw bytes under a namespace
- get_int / set_int                          big-endian, unsigned, <= 2^256-1
- get_str / set_str                          UTF-8
- get_address / set_address                  20-byte canonical addresses
- get_bool / set_bool                        b"\\x01" or absent
- atomic()                                   transaction context manager
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import ContextManager, Dict, Iterator, Optional, Protocol, Union, runtime_checkable

from tld_resolver.errors import ResolverError
from tld_resolver.runtime.context import AddressLike, ZERO_ADDRESS, address_bytes, normalize_address

log = logging.getLogger("tld_resolver.storage")

MAX_KEY_BYTES = 128
MAX_VALUE_BYTES = 128 * 1024
_U256_MAX = (1 << 256) - 1


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for contract storage."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def exists(self, key: bytes) -> bool: ...
    def atomic(self) -> ContextManager[None]: ...


class MemoryBackend:
    """Thread-safe in-memory backend; ``atomic()`` restores a snapshot on error."""

    def __init__(self) -> None:
        self._store: Dict[bytes, bytes] = {}
        self._lock = threading.RLock()
        self._depth = 0

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        with self._lock:
            self._store[key] = value

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._store.pop(key, None)

    def exists(self, key: bytes) -> bool:
        with self._lock:
            return key in self._store

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            outer = self._depth == 0
            snapshot = dict(self._store) if outer else None
            self._depth += 1
            try:
                yield
            except BaseException:
                if outer:
                    self._store = snapshot  # type: ignore[assignment]
                raise
            finally:
                self._depth -= 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


class SQLiteBackend:
    """
    SQLite-backed storage (BLOB keys & values) for persisting admin state
    between process runs.

    - Table schema: kv(k BLOB PRIMARY KEY, v BLOB NOT NULL)
    - Autocommit outside ``atomic()``; ``atomic()`` runs BEGIN IMMEDIATE ...
      COMMIT, rolling back on any exception. Nested ``atomic()`` joins the
      outer transaction.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = str(Path(path).expanduser()) if str(path) != ":memory:" else ":memory:"
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            self.path,
            isolation_level=None,
            check_same_thread=False,
        )
        self._lock = threading.RLock()
        self._depth = 0
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                k BLOB PRIMARY KEY,
                v BLOB NOT NULL
            )
            """
        )

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            row = self._conn.execute("SELECT v FROM kv WHERE k = ?", (memoryview(key),)).fetchone()
        return bytes(row[0]) if row is not None else None

    def set(self, key: bytes, value: bytes) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO kv(k, v) VALUES(?, ?) ON CONFLICT(k) DO UPDATE SET v=excluded.v",
                (memoryview(key), memoryview(value)),
            )

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM kv WHERE k = ?", (memoryview(key),))

    def exists(self, key: bytes) -> bool:
        return self.get(key) is not None

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            outer = self._depth == 0
            if outer:
                self._conn.execute("BEGIN IMMEDIATE")
            self._depth += 1
            try:
                yield
            except BaseException:
                if outer:
                    self._conn.execute("ROLLBACK")
                raise
            else:
                if outer:
                    self._conn.execute("COMMIT")
            finally:
                self._depth -= 1

    def close(self) -> None:
        with self._lock:
            self._conn.close()


def open_backend(path: Optional[Union[str, Path]]) -> StorageBackend:
    """Memory backend for ``None``/empty, SQLite file otherwise."""
    if path is None or str(path) == "":
        return MemoryBackend()
    log.info("opening sqlite state at %s", path)
    return SQLiteBackend(path)


# --------------------------- Contract-facing view --------------------------- #


class Storage:
    """
    Namespaced, typed view over a backend. Several contracts may share one
    backend as long as their namespaces differ.
    """

    def __init__(self, backend: Optional[StorageBackend] = None, namespace: bytes = b"") -> None:
        self.backend: StorageBackend = backend if backend is not None else MemoryBackend()
        self.namespace = bytes(namespace)

    def child(self, namespace: bytes) -> "Storage":
        return Storage(self.backend, self.namespace + bytes(namespace))

    def _key(self, key: bytes) -> bytes:
        if not isinstance(key, (bytes, bytearray)) or len(key) == 0:
            raise ResolverError("storage key must be non-empty bytes", code="storage_invalid")
        full = self.namespace + bytes(key)
        if len(full) > MAX_KEY_BYTES:
            raise ResolverError(
                f"storage key too long (>{MAX_KEY_BYTES} bytes)",
                code="storage_invalid",
                context={"len": len(full)},
            )
        return full

    # raw

    def get(self, key: bytes) -> Optional[bytes]:
        return self.backend.get(self._key(key))

    def set(self, key: bytes, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise ResolverError("storage value must be bytes", code="storage_invalid")
        if len(value) > MAX_VALUE_BYTES:
            raise ResolverError(
                f"storage value too large (>{MAX_VALUE_BYTES} bytes)",
                code="storage_invalid",
                context={"len": len(value)},
            )
        self.backend.set(self._key(key), bytes(value))

    def delete(self, key: bytes) -> None:
        self.backend.delete(self._key(key))

    def exists(self, key: bytes) -> bool:
        return self.backend.exists(self._key(key))

    def atomic(self) -> ContextManager[None]:
        return self.backend.atomic()

    # typed

    def get_int(self, key: bytes, default: int = 0) -> int:
        raw = self.get(key)
        if raw is None or len(raw) == 0:
            return default
        return int.from_bytes(raw, "big", signed=False)

    def set_int(self, key: bytes, value: int) -> None:
        if not isinstance(value, int) or value < 0 or value > _U256_MAX:
            raise ResolverError("set_int out of range (must fit in 256 bits)", code="storage_invalid")
        width = max(1, (value.bit_length() + 7) // 8)
        self.set(key, value.to_bytes(width, "big"))

    def get_str(self, key: bytes) -> str:
        raw = self.get(key)
        return raw.decode("utf-8") if raw else ""

    def set_str(self, key: bytes, value: str) -> None:
        self.set(key, value.encode("utf-8"))

    def get_address(self, key: bytes) -> str:
        raw = self.get(key)
        if not raw:
            return ZERO_ADDRESS
        return normalize_address(raw)

    def set_address(self, key: bytes, value: AddressLike) -> None:
        self.set(key, address_bytes(value))

    def get_bool(self, key: bytes) -> bool:
        return self.get(key) == b"\x01"

    def set_bool(self, key: bytes, value: bool) -> None:
        if value:
            self.set(key, b"\x01")
        else:
            self.delete(key)


__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "SQLiteBackend",
    "open_backend",
    "Storage",
    "MAX_KEY_BYTES",
    "MAX_VALUE_BYTES",
]
