# -*- coding: utf-8 -*-
"""
tld_resolver.registry.deprecation
=================================

TLD contract address → "hidden" flag. A deprecated TLD stays listed in its
factory but every resolver query treats it as absent.

Storage: ``dp:`` || addr20 → b"\\x01" while deprecated (absent otherwise).

Both mutators are idempotent and emit even when the flag does not change:
- ``DeprecatedTldAdded``    {user, tld}
- ``DeprecatedTldRemoved``  {user, tld}
"""
from __future__ import annotations

import logging

from tld_resolver.registry.ownable import OwnableAuthority
from tld_resolver.runtime.context import AddressLike, address_bytes, normalize_address
from tld_resolver.runtime.events import EventLog
from tld_resolver.runtime.storage import Storage

log = logging.getLogger("tld_resolver.registry.deprecation")

_P_FLAG = b"dp:"

EV_DEPRECATED_ADDED = b"DeprecatedTldAdded"
EV_DEPRECATED_REMOVED = b"DeprecatedTldRemoved"


def _k_flag(tld: AddressLike) -> bytes:
    return _P_FLAG + address_bytes(tld)


class DeprecationRegistry:
    def __init__(self, storage: Storage, events: EventLog, authority: OwnableAuthority) -> None:
        self.storage = storage
        self.events = events
        self.authority = authority

    def is_deprecated(self, tld: AddressLike) -> bool:
        return self.storage.get_bool(_k_flag(tld))

    def set_deprecated(self, caller: AddressLike, tld: AddressLike) -> None:
        user = self.authority.require_owner(caller)
        addr = normalize_address(tld)
        self.storage.set_bool(_k_flag(addr), True)
        self.events.emit(EV_DEPRECATED_ADDED, {"user": user, "tld": addr})
        log.info("tld %s deprecated by %s", addr, user)

    def clear_deprecated(self, caller: AddressLike, tld: AddressLike) -> None:
        user = self.authority.require_owner(caller)
        addr = normalize_address(tld)
        self.storage.set_bool(_k_flag(addr), False)
        self.events.emit(EV_DEPRECATED_REMOVED, {"user": user, "tld": addr})
        log.info("tld %s un-deprecated by %s", addr, user)


__all__ = ["DeprecationRegistry", "EV_DEPRECATED_ADDED", "EV_DEPRECATED_REMOVED"]
