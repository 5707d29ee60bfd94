"""
Host runtime for resolver contracts: call context, namespaced storage and
per-contract event logs.
"""

from .context import ZERO_ADDRESS, CallContext, checksum, is_zero, normalize_address
from .events import CanonicalEvent, Event, EventLog
from .storage import MemoryBackend, SQLiteBackend, Storage, StorageBackend, open_backend

__all__ = [
    "ZERO_ADDRESS",
    "CallContext",
    "checksum",
    "is_zero",
    "normalize_address",
    "CanonicalEvent",
    "Event",
    "EventLog",
    "MemoryBackend",
    "SQLiteBackend",
    "Storage",
    "StorageBackend",
    "open_backend",
]
