# -*- coding: utf-8 -*-
"""
tld_resolver.registry.factories
===============================

Authority-gated ordered list of TLD factory addresses.

Storage layout (inside the owning contract's namespace)
-------------------------------------------------------
- ``fr:len``              number of slots (big-endian uint)
- ``fr:i:`` || u64(i)     20-byte factory address at position i

Ordering
--------
Insertion order, except ``remove_at`` swaps the last element into the removed
slot before truncating, so the order is **not** stable across removals.
Duplicates are accepted; they only cost duplicate scan work.

Events
------
- ``FactoryAddressAdded``    {user, factory}
- ``FactoryAddressRemoved``  {user, factory, index}

Failures
--------
- ``Unauthorized``     caller is not the authority (checked first)
- ``IndexOutOfRange``  removal index outside ``[0, len)``
"""
from __future__ import annotations

import logging
from typing import Iterator, List

from tld_resolver.errors import IndexOutOfRange
from tld_resolver.registry.ownable import OwnableAuthority
from tld_resolver.runtime.context import AddressLike, normalize_address
from tld_resolver.runtime.events import EventLog
from tld_resolver.runtime.storage import Storage

log = logging.getLogger("tld_resolver.registry.factories")

_K_LEN = b"fr:len"
_P_ITEM = b"fr:i:"

EV_FACTORY_ADDED = b"FactoryAddressAdded"
EV_FACTORY_REMOVED = b"FactoryAddressRemoved"


def _k_item(index: int) -> bytes:
    return _P_ITEM + index.to_bytes(8, "big")


class FactoryRegistry:
    def __init__(self, storage: Storage, events: EventLog, authority: OwnableAuthority) -> None:
        self.storage = storage
        self.events = events
        self.authority = authority

    def __len__(self) -> int:
        return self.storage.get_int(_K_LEN)

    def __iter__(self) -> Iterator[str]:
        return iter(self.list())

    def at(self, index: int) -> str:
        self._check_index(index)
        return self.storage.get_address(_k_item(index))

    def list(self) -> List[str]:
        """The full sequence in current internal order."""
        return [self.storage.get_address(_k_item(i)) for i in range(len(self))]

    def add(self, caller: AddressLike, factory: AddressLike) -> int:
        """Append ``factory``; returns its index."""
        user = self.authority.require_owner(caller)
        addr = normalize_address(factory)
        with self.storage.atomic():
            n = len(self)
            self.storage.set_address(_k_item(n), addr)
            self.storage.set_int(_K_LEN, n + 1)
            self.events.emit(EV_FACTORY_ADDED, {"user": user, "factory": addr})
        log.info("factory added %s at index %d by %s", addr, n, user)
        return n

    def remove_at(self, caller: AddressLike, index: int) -> str:
        """
        Swap-remove the factory at ``index``; returns the removed address.
        The element previously last now sits at ``index``.
        """
        user = self.authority.require_owner(caller)
        self._check_index(index)
        with self.storage.atomic():
            n = len(self)
            removed = self.storage.get_address(_k_item(index))
            last = n - 1
            if index != last:
                self.storage.set_address(_k_item(index), self.storage.get_address(_k_item(last)))
            self.storage.delete(_k_item(last))
            self.storage.set_int(_K_LEN, last)
            self.events.emit(EV_FACTORY_REMOVED, {"user": user, "factory": removed, "index": index})
        log.info("factory removed %s from index %d by %s", removed, index, user)
        return removed

    def _check_index(self, index: int) -> None:
        n = len(self)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < n:
            raise IndexOutOfRange(
                "Index out of bounds",
                context={"index": index, "length": n},
            )


__all__ = ["FactoryRegistry", "EV_FACTORY_ADDED", "EV_FACTORY_REMOVED"]
