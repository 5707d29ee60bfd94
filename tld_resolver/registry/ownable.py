# -*- coding: utf-8 -*-
"""
tld_resolver.registry.ownable
=============================

Single-owner authority for resolver contracts.

This module provides a focused owner storage and control surface:
- read the current owner (`owner`)
- check that a caller is the owner (`require_owner`)
- transfer ownership to a new account (`transfer_ownership`)
- renounce ownership (clear owner) (`renounce_ownership`)

Conventions
-----------
- The owner value lives at a fixed key inside the contract's storage namespace
  (`OWNER_KEY = b"access:owner"`), so registries sharing a namespace share
  one authority.
- Events:
    - "OwnershipTransferred" args: {"previous": str, "new": str}

Safety notes
------------
- The owner is written once at construction; nothing overwrites it except
  `transfer_ownership` / `renounce_ownership`.
- `transfer_ownership` rejects the zero address; use `renounce_ownership`
  explicitly to leave the contract without an owner.
"""
from __future__ import annotations

import logging
from typing import Optional

from tld_resolver.errors import AddressError, Unauthorized
from tld_resolver.runtime.context import ZERO_ADDRESS, AddressLike, CallContext, normalize_address
from tld_resolver.runtime.events import EventLog
from tld_resolver.runtime.storage import Storage

log = logging.getLogger("tld_resolver.access")

OWNER_KEY = b"access:owner"
EV_OWNERSHIP = b"OwnershipTransferred"


class OwnableAuthority:
    """Owner storage plus the capability check every mutator runs first."""

    def __init__(
        self,
        storage: Storage,
        events: EventLog,
        initial_owner: Optional[AddressLike] = None,
    ) -> None:
        self.storage = storage
        self.events = events
        if initial_owner is not None and not storage.exists(OWNER_KEY):
            owner = normalize_address(initial_owner)
            storage.set_address(OWNER_KEY, owner)
            events.emit(EV_OWNERSHIP, {"previous": ZERO_ADDRESS, "new": owner})

    def owner(self) -> str:
        """Current owner, or the zero address after renouncing."""
        return self.storage.get_address(OWNER_KEY)

    def require_owner(self, caller: AddressLike) -> str:
        """Raise Unauthorized unless `caller` is the current owner; return the caller."""
        sender = CallContext.of(caller).sender
        owner = self.owner()
        if owner == ZERO_ADDRESS or sender != owner:
            raise Unauthorized(
                "Ownable: caller is not the owner",
                context={"caller": sender, "owner": owner},
            )
        return sender

    def transfer_ownership(self, caller: AddressLike, new_owner: AddressLike) -> None:
        sender = self.require_owner(caller)
        new = normalize_address(new_owner)
        if new == ZERO_ADDRESS:
            raise AddressError("Ownable: new owner is the zero address")
        self.storage.set_address(OWNER_KEY, new)
        self.events.emit(EV_OWNERSHIP, {"previous": sender, "new": new})
        log.info("ownership transferred %s -> %s", sender, new)

    def renounce_ownership(self, caller: AddressLike) -> None:
        sender = self.require_owner(caller)
        self.storage.delete(OWNER_KEY)
        self.events.emit(EV_OWNERSHIP, {"previous": sender, "new": ZERO_ADDRESS})
        log.info("ownership renounced by %s", sender)


__all__ = ["OWNER_KEY", "EV_OWNERSHIP", "OwnableAuthority"]
