"""
In-process stand-ins for deployed contracts.

``LocalChain`` maps addresses to contract objects and implements the
``ContractDirectory`` the resolver and metadata renderer read through. An
address nobody deployed behaves like an empty contract: every view returns
the zero address or an empty string.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List

from eth_utils import keccak

from tld_resolver.errors import AddressError
from tld_resolver.interfaces import DomainRecord, FactoryIndex, Ownable, TldDirectory
from tld_resolver.runtime.context import ZERO_ADDRESS, AddressLike, normalize_address

log = logging.getLogger("tld_resolver.local")


def derive_address(tag: str) -> str:
    """Stable 20-byte address from a tag (last 20 bytes of keccak)."""
    return "0x" + keccak(text=tag)[-20:].hex()


class _EmptyContract:
    """What a call to an address without code looks like to a view."""

    def owner(self) -> str:
        return ZERO_ADDRESS

    def tld_names_addresses(self, tld_name: str) -> str:
        return ZERO_ADDRESS

    def get_tlds_array(self) -> List[str]:
        return []

    def default_names(self, addr: str) -> str:
        return ""

    def get_domain_holder(self, domain_name: str) -> str:
        return ZERO_ADDRESS

    def get_domain_data(self, domain_name: str) -> str:
        return ""

    def domains(self, domain_name: str) -> DomainRecord:
        return DomainRecord(name="", token_id=0, holder=ZERO_ADDRESS, data="")

    def token_uri(self, token_id: int) -> str:
        return ""


_EMPTY = _EmptyContract()


class LocalChain:
    def __init__(self) -> None:
        self._contracts: Dict[str, Any] = {}

    def deploy(self, contract: Any) -> Any:
        addr = normalize_address(contract.address)
        if addr in self._contracts and self._contracts[addr] is not contract:
            raise ValueError(f"address already in use: {addr}")
        self._contracts[addr] = contract
        log.debug("deployed %s at %s", type(contract).__name__, addr)
        return contract

    def at(self, addr: AddressLike) -> Any:
        return self._contracts.get(normalize_address(addr), _EMPTY)

    def __contains__(self, addr: object) -> bool:
        try:
            return normalize_address(addr) in self._contracts  # type: ignore[arg-type]
        except AddressError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._contracts))

    # ---- ContractDirectory

    # A contract lacking the requested interface reads as an empty one.

    def _as(self, addr: str, iface: type) -> Any:
        contract = self.at(addr)
        if contract is _EMPTY or isinstance(contract, iface):
            return contract
        log.debug("%s at %s is not a %s", type(contract).__name__, addr, iface.__name__)
        return _EMPTY

    def factory(self, addr: str) -> FactoryIndex:
        return self._as(addr, FactoryIndex)

    def tld(self, addr: str) -> TldDirectory:
        return self._as(addr, TldDirectory)

    def ownable(self, addr: str) -> Ownable:
        return self._as(addr, Ownable)


__all__ = ["LocalChain", "derive_address"]
