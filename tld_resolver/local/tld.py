# -*- coding: utf-8 -*-
"""
tld_resolver.local.tld
======================

In-memory TLD contract: one TLD's domain table, per-address default names,
ownership and token URIs.

Token ids start at 1, so id 0 (what ``domains()`` reports for an unknown
name) never renders. Minting a holder's first domain also makes it their
default name. Token URIs come from a ``MetadataRenderer`` called with this
TLD as the caller, which is what scopes brand and description to the TLD.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from tld_resolver.errors import ResolverError, Unauthorized
from tld_resolver.interfaces import DomainRecord
from tld_resolver.metadata.renderer import MetadataRenderer
from tld_resolver.runtime.context import ZERO_ADDRESS, AddressLike, CallContext, normalize_address
from tld_resolver.runtime.events import EventLog

log = logging.getLogger("tld_resolver.local.tld")

EV_DOMAIN_CREATED = b"DomainCreated"
EV_DEFAULT_CHANGED = b"DefaultDomainChanged"
EV_DATA_CHANGED = b"DataChanged"


@dataclass
class _Domain:
    name: str
    token_id: int
    holder: str
    data: str


def _check_label(domain_name: str) -> str:
    if not isinstance(domain_name, str) or not domain_name:
        raise ResolverError("domain name must be a non-empty string", code="bad_domain")
    if "." in domain_name or " " in domain_name:
        raise ResolverError("domain name cannot contain dots or spaces", code="bad_domain")
    return domain_name.lower()


class LocalTld:
    def __init__(
        self,
        name: str,
        owner: AddressLike,
        address: AddressLike,
        metadata: Optional[MetadataRenderer] = None,
    ) -> None:
        self.name = name
        self.address = normalize_address(address)
        self._owner = normalize_address(owner)
        self.metadata = metadata
        self.events = EventLog()
        self._domains: Dict[str, _Domain] = {}
        self._by_token: Dict[int, str] = {}
        self._defaults: Dict[str, str] = {}
        self._next_token_id = 1

    # ---- ownership

    def owner(self) -> str:
        return self._owner

    def _require_owner(self, caller: AddressLike) -> str:
        sender = CallContext.of(caller).sender
        if sender != self._owner:
            raise Unauthorized("Ownable: caller is not the owner", context={"caller": sender})
        return sender

    def transfer_ownership(self, caller: AddressLike, new_owner: AddressLike) -> None:
        self._require_owner(caller)
        self._owner = normalize_address(new_owner)

    def change_metadata_address(self, caller: AddressLike, metadata: MetadataRenderer) -> None:
        self._require_owner(caller)
        self.metadata = metadata

    # ---- minting & holder edits

    def mint(self, domain_name: str, holder: AddressLike, data: str = "") -> int:
        label = _check_label(domain_name)
        if label in self._domains:
            raise ResolverError(f"domain already exists: {label}{self.name}", code="domain_taken")
        owner = normalize_address(holder)
        token_id = self._next_token_id
        self._next_token_id += 1
        self._domains[label] = _Domain(name=label, token_id=token_id, holder=owner, data=data)
        self._by_token[token_id] = label
        if not self._defaults.get(owner):
            self._defaults[owner] = label
        self.events.emit(EV_DOMAIN_CREATED, {"user": owner, "name": label, "token_id": token_id})
        log.debug("minted %s%s (#%d) to %s", label, self.name, token_id, owner)
        return token_id

    def _require_holder(self, caller: AddressLike, domain_name: str) -> _Domain:
        sender = CallContext.of(caller).sender
        dom = self._domains.get(domain_name.lower())
        if dom is None or dom.holder != sender:
            raise Unauthorized("Sender is not domain holder", context={"caller": sender})
        return dom

    def edit_default_domain(self, caller: AddressLike, domain_name: str) -> None:
        dom = self._require_holder(caller, domain_name)
        self._defaults[dom.holder] = dom.name
        self.events.emit(EV_DEFAULT_CHANGED, {"user": dom.holder, "name": dom.name})

    def set_default_name(self, holder: AddressLike, default_name: str) -> None:
        """Direct write of the reverse record (snapshot loading only)."""
        self._defaults[normalize_address(holder)] = default_name

    def edit_data(self, caller: AddressLike, domain_name: str, data: str) -> None:
        dom = self._require_holder(caller, domain_name)
        dom.data = data
        self.events.emit(EV_DATA_CHANGED, {"user": dom.holder, "name": dom.name})

    # ---- TldDirectory views

    def default_names(self, addr: str) -> str:
        return self._defaults.get(normalize_address(addr), "")

    def get_domain_holder(self, domain_name: str) -> str:
        dom = self._domains.get(domain_name.lower())
        return dom.holder if dom else ZERO_ADDRESS

    def get_domain_data(self, domain_name: str) -> str:
        dom = self._domains.get(domain_name.lower())
        return dom.data if dom else ""

    def domains(self, domain_name: str) -> DomainRecord:
        dom = self._domains.get(domain_name.lower())
        if dom is None:
            return DomainRecord(name="", token_id=0, holder=ZERO_ADDRESS, data="")
        return DomainRecord(name=dom.name, token_id=dom.token_id, holder=dom.holder, data=dom.data)

    def token_uri(self, token_id: int) -> str:
        label = self._by_token.get(token_id)
        if label is None or self.metadata is None:
            return ""
        ctx = CallContext(sender=self.address)
        return self.metadata.render_token_uri(ctx, label, self.name, token_id)

    def domain_names(self) -> List[str]:
        return list(self._domains)


__all__ = ["LocalTld", "EV_DOMAIN_CREATED", "EV_DEFAULT_CHANGED", "EV_DATA_CHANGED"]
