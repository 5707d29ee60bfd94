# -*- coding: utf-8 -*-
"""
tld_resolver.contract
=====================

The resolver contract: one owner, a factory list, a deprecation map and the
cross-factory query surface, wired over a single storage namespace and event
log.

Functions
---------
Reads (never fail on a missing binding):
- get_domain_holder(domain, tld)        -> address (zero if not found)
- get_domain_data(domain, tld)          -> str
- get_domain_token_uri(domain, tld)     -> str
- get_tld_address(tld)                  -> address
- get_tld_factory_address(tld)          -> address
- get_default_domain(addr, tld)         -> str (no suffix)
- get_default_domains(addr)             -> str (space separated, with suffixes)
- get_first_default_domain(addr)        -> str (with suffix)
- get_tlds()                            -> str ("name,0xaddr\\n" rows)
- get_factories_array()                 -> list[address]
- is_tld_deprecated(tld_addr)           -> bool

Owner-only writes:
- add_factory_address(caller, addr)
- remove_factory_address(caller, index)
- add_deprecated_tld_address(caller, tld_addr)
- remove_deprecated_tld_address(caller, tld_addr)
- transfer_ownership(caller, new_owner) / renounce_ownership(caller)

Events: see ``registry.factories``, ``registry.deprecation`` and
``registry.ownable``.
"""
from __future__ import annotations

from typing import List, Optional

from tld_resolver.config import JoinPolicy
from tld_resolver.interfaces import ContractDirectory
from tld_resolver.registry import DeprecationRegistry, FactoryRegistry, OwnableAuthority
from tld_resolver.resolver import CrossFactoryResolver
from tld_resolver.runtime.context import AddressLike
from tld_resolver.runtime.events import EventLog
from tld_resolver.runtime.storage import Storage, StorageBackend

NAMESPACE = b"resolver:"


class ResolverContract:
    def __init__(
        self,
        owner: AddressLike,
        contracts: ContractDirectory,
        *,
        backend: Optional[StorageBackend] = None,
        join_policy: JoinPolicy = JoinPolicy.REFERENCE,
    ) -> None:
        self.storage = Storage(backend, NAMESPACE)
        self.events = EventLog()
        self.authority = OwnableAuthority(self.storage, self.events, owner)
        self.factories = FactoryRegistry(self.storage, self.events, self.authority)
        self.deprecations = DeprecationRegistry(self.storage, self.events, self.authority)
        self.resolver = CrossFactoryResolver(self.factories, self.deprecations, contracts, join_policy)

    # ---- ownership

    def owner(self) -> str:
        return self.authority.owner()

    def transfer_ownership(self, caller: AddressLike, new_owner: AddressLike) -> None:
        self.authority.transfer_ownership(caller, new_owner)

    def renounce_ownership(self, caller: AddressLike) -> None:
        self.authority.renounce_ownership(caller)

    # ---- reads

    def get_domain_holder(self, domain_name: str, tld: str) -> str:
        return self.resolver.resolve_owner(domain_name, tld)

    def get_domain_data(self, domain_name: str, tld: str) -> str:
        return self.resolver.resolve_data(domain_name, tld)

    def get_domain_token_uri(self, domain_name: str, tld: str) -> str:
        return self.resolver.resolve_token_uri(domain_name, tld)

    def get_tld_address(self, tld: str) -> str:
        return self.resolver.resolve_tld_contract(tld)

    def get_tld_factory_address(self, tld: str) -> str:
        return self.resolver.resolve_tld_factory(tld)

    def get_default_domain(self, addr: AddressLike, tld: str) -> str:
        return self.resolver.get_default_domain(addr, tld)

    def get_default_domains(self, addr: AddressLike) -> str:
        return self.resolver.get_default_domains(addr)

    def get_first_default_domain(self, addr: AddressLike) -> str:
        return self.resolver.get_first_default_domain(addr)

    def get_tlds(self) -> str:
        return self.resolver.list_active_tlds()

    def get_factories_array(self) -> List[str]:
        return self.factories.list()

    def is_tld_deprecated(self, tld_addr: AddressLike) -> bool:
        return self.deprecations.is_deprecated(tld_addr)

    # ---- owner-only writes

    def add_factory_address(self, caller: AddressLike, factory: AddressLike) -> None:
        self.factories.add(caller, factory)

    def remove_factory_address(self, caller: AddressLike, index: int) -> None:
        self.factories.remove_at(caller, index)

    def add_deprecated_tld_address(self, caller: AddressLike, tld_addr: AddressLike) -> None:
        self.deprecations.set_deprecated(caller, tld_addr)

    def remove_deprecated_tld_address(self, caller: AddressLike, tld_addr: AddressLike) -> None:
        self.deprecations.clear_deprecated(caller, tld_addr)


__all__ = ["ResolverContract", "NAMESPACE"]
