# -*- coding: utf-8 -*-
"""
tld_resolver.metadata.renderer
==============================

Per-TLD brand/description strings plus the token-URI builder TLD contracts
call to render their domain NFTs.

Authorization
-------------
``set_brand`` / ``set_description`` require the caller to be the *current*
``owner()`` of the TLD contract, asked of that contract on every call. If TLD
ownership moves, the new owner gains these rights on the next call.

Caller-scoped rendering
-----------------------
``render_token_uri`` reads brand and description keyed by ``ctx.sender``,
i.e. the TLD contract making the call, not by a parameter. A call made from
any other context renders another TLD's (or empty) branding.

Events
------
- ``BrandChanged``        {user, tld, brand}
- ``DescriptionChanged``  {user, tld, description}
"""
from __future__ import annotations

import json
import logging
from typing import Optional

from tld_resolver.errors import Unauthorized
from tld_resolver.interfaces import ContractDirectory
from tld_resolver.metadata.svg import JSON_DATA_URI_PREFIX, b64, svg_data_uri
from tld_resolver.runtime.context import ZERO_ADDRESS, AddressLike, CallContext, address_bytes, normalize_address
from tld_resolver.runtime.events import EventLog
from tld_resolver.runtime.storage import Storage, StorageBackend

log = logging.getLogger("tld_resolver.metadata")

NAMESPACE = b"metadata:"
_P_BRAND = b"md:brand:"
_P_DESC = b"md:desc:"

EV_BRAND_CHANGED = b"BrandChanged"
EV_DESCRIPTION_CHANGED = b"DescriptionChanged"


class MetadataRenderer:
    def __init__(self, contracts: ContractDirectory, *, backend: Optional[StorageBackend] = None) -> None:
        self.contracts = contracts
        self.storage = Storage(backend, NAMESPACE)
        self.events = EventLog()

    # ---- views

    def brand(self, tld: AddressLike) -> str:
        return self.storage.get_str(_P_BRAND + address_bytes(tld))

    def description(self, tld: AddressLike) -> str:
        return self.storage.get_str(_P_DESC + address_bytes(tld))

    # ---- TLD-owner writes

    def _require_tld_owner(self, caller: AddressLike, tld: str) -> str:
        sender = CallContext.of(caller).sender
        owner = normalize_address(self.contracts.ownable(tld).owner())
        if owner == ZERO_ADDRESS or sender != owner:
            raise Unauthorized(
                "Sender not TLD owner",
                context={"caller": sender, "tld": tld, "owner": owner},
            )
        return sender

    def set_brand(self, caller: AddressLike, tld: AddressLike, brand: str) -> None:
        addr = normalize_address(tld)
        user = self._require_tld_owner(caller, addr)
        with self.storage.atomic():
            self.storage.set_str(_P_BRAND + address_bytes(addr), brand)
            self.events.emit(EV_BRAND_CHANGED, {"user": user, "tld": addr, "brand": brand})
        log.info("brand for %s set by %s", addr, user)

    def set_description(self, caller: AddressLike, tld: AddressLike, description: str) -> None:
        addr = normalize_address(tld)
        user = self._require_tld_owner(caller, addr)
        with self.storage.atomic():
            self.storage.set_str(_P_DESC + address_bytes(addr), description)
            self.events.emit(
                EV_DESCRIPTION_CHANGED,
                {"user": user, "tld": addr, "description": description},
            )
        log.info("description for %s set by %s", addr, user)

    # ---- rendering

    def render_token_uri(self, ctx: CallContext, domain_name: str, tld: str, token_id: int = 0) -> str:
        """
        ``data:application/json;base64,`` URI with name, description and an
        embedded SVG image. ``token_id`` is accepted for interface parity with
        TLD contracts and does not affect the output.
        """
        caller = CallContext.of(ctx).sender
        full_name = domain_name + tld
        doc = {
            "name": full_name,
            "description": self.description(caller),
            "image": svg_data_uri(full_name, self.brand(caller)),
        }
        return JSON_DATA_URI_PREFIX + b64(json.dumps(doc, ensure_ascii=False))


__all__ = ["MetadataRenderer", "EV_BRAND_CHANGED", "EV_DESCRIPTION_CHANGED"]
