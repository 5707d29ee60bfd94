# -*- coding: utf-8 -*-
"""
tld_resolver.resolver
=====================

Cross-factory resolution: read-only queries spanning every registered factory
and every TLD those factories created.

Scan policy (shared by every single-TLD lookup)
-----------------------------------------------
Factories are visited in registry order and each is asked for the contract
bound to the requested TLD name.

- zero address             → this factory does not know the name; next factory
- live, not deprecated     → answer from that TLD and stop (first match wins)
- live, deprecated         → answer "not found" and stop; later factories are
                             **not** consulted even if they bind the same name
- no factory binds it      → "not found"

"Not found" is always the zero address or the empty string; no query raises
because a binding is missing, stale or deprecated.

Whole-index queries (reverse lookup over all TLDs, active-TLD listing) walk
factories in order and, inside each, the factory's own TLD enumeration order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Protocol

from tld_resolver.config import JoinPolicy
from tld_resolver.interfaces import ContractDirectory, TldDirectory
from tld_resolver.runtime.context import ZERO_ADDRESS, AddressLike, normalize_address

log = logging.getLogger("tld_resolver.resolver")

DOMAIN_SEPARATOR = " "


class FactorySource(Protocol):
    def list(self) -> List[str]: ...


class DeprecationSource(Protocol):
    def is_deprecated(self, tld: AddressLike) -> bool: ...


@dataclass(frozen=True)
class TldBinding:
    """A factory's binding of a TLD name to a TLD contract."""

    factory: str
    name: str
    address: str


@dataclass(frozen=True)
class _Enumerated:
    binding: TldBinding
    position: int


class CrossFactoryResolver:
    def __init__(
        self,
        factories: FactorySource,
        deprecations: DeprecationSource,
        contracts: ContractDirectory,
        join_policy: JoinPolicy = JoinPolicy.REFERENCE,
    ) -> None:
        self.factories = factories
        self.deprecations = deprecations
        self.contracts = contracts
        self.join_policy = join_policy

    # ------------------------------------------------------------------ scans

    def find_tld(self, tld_name: str) -> Optional[TldBinding]:
        """
        First live binding of ``tld_name`` in registry order, or None. A
        deprecated binding ends the scan with None.
        """
        for factory in self.factories.list():
            tld_addr = normalize_address(self.contracts.factory(factory).tld_names_addresses(tld_name))
            if tld_addr == ZERO_ADDRESS:
                continue
            if self.deprecations.is_deprecated(tld_addr):
                log.debug("tld %s bound by %s at %s is deprecated; scan halted", tld_name, factory, tld_addr)
                return None
            return TldBinding(factory=factory, name=tld_name, address=tld_addr)
        return None

    def _tld(self, tld_name: str) -> Optional[TldDirectory]:
        hit = self.find_tld(tld_name)
        if hit is None:
            return None
        return self.contracts.tld(hit.address)

    def iter_bindings(self) -> Iterator[TldBinding]:
        """Every (factory, TLD) pair in factory-then-enumeration order, deprecated or not."""
        for factory in self.factories.list():
            index = self.contracts.factory(factory)
            for name in index.get_tlds_array():
                yield TldBinding(
                    factory=factory,
                    name=name,
                    address=normalize_address(index.tld_names_addresses(name)),
                )

    def _is_live(self, binding: TldBinding) -> bool:
        return binding.address != ZERO_ADDRESS and not self.deprecations.is_deprecated(binding.address)

    # ------------------------------------------------------- forward lookups

    def resolve_owner(self, domain_name: str, tld_name: str) -> str:
        tld = self._tld(tld_name)
        if tld is None:
            return ZERO_ADDRESS
        return normalize_address(tld.get_domain_holder(domain_name))

    def resolve_data(self, domain_name: str, tld_name: str) -> str:
        tld = self._tld(tld_name)
        if tld is None:
            return ""
        return tld.get_domain_data(domain_name)

    def resolve_token_uri(self, domain_name: str, tld_name: str) -> str:
        tld = self._tld(tld_name)
        if tld is None:
            return ""
        record = tld.domains(domain_name)
        return tld.token_uri(record.token_id)

    def resolve_tld_contract(self, tld_name: str) -> str:
        hit = self.find_tld(tld_name)
        return hit.address if hit is not None else ZERO_ADDRESS

    def resolve_tld_factory(self, tld_name: str) -> str:
        hit = self.find_tld(tld_name)
        return hit.factory if hit is not None else ZERO_ADDRESS

    # ------------------------------------------------------- reverse lookups

    def get_default_domain(self, addr: AddressLike, tld_name: str) -> str:
        """Default name of ``addr`` within one TLD, without the TLD suffix."""
        tld = self._tld(tld_name)
        if tld is None:
            return ""
        return tld.default_names(normalize_address(addr))

    def _default_domain_hits(self, addr: str, bindings: Iterable[TldBinding]) -> Iterator[_Enumerated]:
        # Unbound (zero) entries are skipped but still occupy a raw position.
        for position, binding in enumerate(bindings):
            if binding.address == ZERO_ADDRESS:
                continue
            default_name = self.contracts.tld(binding.address).default_names(addr)
            if default_name and not self.deprecations.is_deprecated(binding.address):
                yield _Enumerated(
                    binding=TldBinding(binding.factory, default_name + binding.name, binding.address),
                    position=position,
                )

    def get_default_domains(self, addr: AddressLike) -> str:
        """
        Every default domain of ``addr`` across all TLDs as space-separated
        ``name+suffix`` tokens, in factory-then-TLD order.

        Under ``JoinPolicy.REFERENCE`` the separator after an entry is dropped
        only when that entry is the last raw enumeration position, so a
        skipped final TLD leaves a trailing space. ``JoinPolicy.COMPACT``
        places separators strictly between included entries.
        """
        owner = normalize_address(addr)
        bindings = list(self.iter_bindings())
        hits = list(self._default_domain_hits(owner, bindings))
        if self.join_policy is JoinPolicy.COMPACT:
            return DOMAIN_SEPARATOR.join(h.binding.name for h in hits)

        last_position = len(bindings) - 1
        out: List[str] = []
        for hit in hits:
            out.append(hit.binding.name)
            if hit.position < last_position:
                out.append(DOMAIN_SEPARATOR)
        return "".join(out)

    def get_first_default_domain(self, addr: AddressLike) -> str:
        """First qualifying ``name+suffix``; stops scanning at the first hit."""
        for hit in self._default_domain_hits(normalize_address(addr), self.iter_bindings()):
            return hit.binding.name
        return ""

    # ----------------------------------------------------------- enumeration

    def active_tlds(self) -> List[TldBinding]:
        return [b for b in self.iter_bindings() if self._is_live(b)]

    def list_active_tlds(self) -> str:
        """``name,0xaddress\\n`` per non-deprecated TLD, no header."""
        return "".join(f"{b.name},{b.address}\n" for b in self.active_tlds())


__all__ = [
    "CrossFactoryResolver",
    "TldBinding",
    "FactorySource",
    "DeprecationSource",
    "DOMAIN_SEPARATOR",
]
