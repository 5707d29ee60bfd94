"""
In-memory TLD factory: creates ``LocalTld`` contracts and answers the two
views the resolver needs (name → address, enumeration in creation order).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from tld_resolver.errors import ResolverError, Unauthorized, require
from tld_resolver.local.chain import LocalChain, derive_address
from tld_resolver.local.tld import LocalTld
from tld_resolver.metadata.renderer import MetadataRenderer
from tld_resolver.runtime.context import ZERO_ADDRESS, AddressLike, CallContext, normalize_address

log = logging.getLogger("tld_resolver.local.factory")


class BadTldName(ResolverError):
    default_code = "bad_tld"


def check_tld_name(name: str) -> str:
    require(
        isinstance(name, str) and len(name) >= 2 and name.startswith("."),
        f"TLD name must start with a dot: {name!r}",
        exc=BadTldName,
    )
    require(name.count(".") == 1 and " " not in name, f"TLD name must be a single label: {name!r}", exc=BadTldName)
    return name.lower()


class LocalFactory:
    def __init__(self, chain: LocalChain, owner: AddressLike, address: Optional[AddressLike] = None) -> None:
        self.chain = chain
        self._owner = normalize_address(owner)
        self.address = normalize_address(address) if address is not None else derive_address(
            f"factory:{self._owner}:{len(list(chain))}"
        )
        self._tlds: Dict[str, str] = {}
        self._names: List[str] = []
        chain.deploy(self)

    def owner(self) -> str:
        return self._owner

    def create_tld(
        self,
        caller: AddressLike,
        name: str,
        tld_owner: Optional[AddressLike] = None,
        *,
        address: Optional[AddressLike] = None,
        metadata: Optional[MetadataRenderer] = None,
    ) -> LocalTld:
        """Owner-only: deploy a TLD contract and bind ``name`` to it."""
        sender = CallContext.of(caller).sender
        require(sender == self._owner, "Ownable: caller is not the owner", exc=Unauthorized, context={"caller": sender})
        tld_name = check_tld_name(name)
        if tld_name in self._tlds:
            raise ResolverError(f"TLD already exists: {tld_name}", code="tld_exists")
        tld = LocalTld(
            name=tld_name,
            owner=tld_owner if tld_owner is not None else sender,
            address=address if address is not None else derive_address(f"tld:{self.address}:{tld_name}"),
            metadata=metadata,
        )
        self.chain.deploy(tld)
        self._tlds[tld_name] = tld.address
        self._names.append(tld_name)
        log.info("factory %s created tld %s at %s", self.address, tld_name, tld.address)
        return tld

    # ---- FactoryIndex views

    def tld_names_addresses(self, tld_name: str) -> str:
        return self._tlds.get(tld_name, ZERO_ADDRESS)

    def get_tlds_array(self) -> List[str]:
        return list(self._names)


__all__ = ["BadTldName", "LocalFactory", "check_tld_name"]
