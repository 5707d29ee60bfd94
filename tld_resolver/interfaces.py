"""
Interfaces of the external contracts the resolver consumes.

The resolver never mutates these; it only reads through them. Local
in-memory implementations live in ``tld_resolver.local`` and live-chain
implementations in ``tld_resolver.adapters.evm``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, runtime_checkable


@dataclass(frozen=True)
class DomainRecord:
    """What ``domains(name)`` returns on a TLD contract."""

    name: str
    token_id: int
    holder: str
    data: str


@runtime_checkable
class Ownable(Protocol):
    def owner(self) -> str: ...


@runtime_checkable
class TldDirectory(Protocol):
    """One TLD's domain table plus its per-address default-domain mapping."""

    def default_names(self, addr: str) -> str: ...
    def get_domain_holder(self, domain_name: str) -> str: ...
    def get_domain_data(self, domain_name: str) -> str: ...
    def domains(self, domain_name: str) -> DomainRecord: ...
    def token_uri(self, token_id: int) -> str: ...


@runtime_checkable
class FactoryIndex(Protocol):
    """The set of TLD names a factory created and their contract addresses."""

    def tld_names_addresses(self, tld_name: str) -> str: ...
    def get_tlds_array(self) -> List[str]: ...


class ContractDirectory(Protocol):
    """
    Turns an address into a contract handle. The resolver only stores
    addresses; a directory is how it reaches the contracts behind them.
    """

    def factory(self, addr: str) -> FactoryIndex: ...
    def tld(self, addr: str) -> TldDirectory: ...
    def ownable(self, addr: str) -> Ownable: ...


__all__ = [
    "DomainRecord",
    "Ownable",
    "TldDirectory",
    "FactoryIndex",
    "ContractDirectory",
]
