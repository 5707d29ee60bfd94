"""
World snapshots: a JSON description of factories, TLDs, domains and resolver
admin state, loaded into a fully wired local world for offline queries.

Example
-------
    {
      "owner": "0x00000000000000000000000000000000000000aa",
      "factories": [
        {
          "address": "0x...f1",
          "owner": "0x...aa",
          "tlds": [
            {
              "name": ".wagmi",
              "address": "0x...a1",
              "brand": "Wagmi Names",
              "description": "Domains for the wagmi crowd",
              "domains": [{"name": "alice", "holder": "0x...01", "data": "{}"}],
              "defaults": {"0x...01": "alice"}
            }
          ]
        }
      ],
      "registry": ["0x...f1"],
      "deprecated": []
    }

``registry`` is optional; when absent the resolver registers the factories in
file order. Repeat an address there to register it twice.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Dict, List, Optional, Union

from pydantic import AfterValidator, BaseModel, Field, ValidationError

from tld_resolver.config import JoinPolicy
from tld_resolver.contract import ResolverContract
from tld_resolver.errors import ResolverError, SnapshotError
from tld_resolver.local.chain import LocalChain
from tld_resolver.local.factory import LocalFactory
from tld_resolver.local.tld import LocalTld
from tld_resolver.metadata.renderer import MetadataRenderer
from tld_resolver.runtime.context import normalize_address
from tld_resolver.runtime.storage import StorageBackend

log = logging.getLogger("tld_resolver.snapshot")


def _address(v: str) -> str:
    try:
        return normalize_address(v)
    except ResolverError as exc:
        raise ValueError(str(exc)) from exc


Address = Annotated[str, AfterValidator(_address)]


class DomainModel(BaseModel):
    name: str
    holder: Address
    data: str = ""


class TldModel(BaseModel):
    name: str
    address: Optional[Address] = None
    owner: Optional[Address] = None
    brand: str = ""
    description: str = ""
    domains: List[DomainModel] = Field(default_factory=list)
    defaults: Dict[Address, str] = Field(default_factory=dict)


class FactoryModel(BaseModel):
    address: Optional[Address] = None
    owner: Optional[Address] = None
    tlds: List[TldModel] = Field(default_factory=list)


class SnapshotModel(BaseModel):
    owner: Address
    join_policy: JoinPolicy = JoinPolicy.REFERENCE
    factories: List[FactoryModel] = Field(default_factory=list)
    registry: Optional[List[Address]] = None
    deprecated: List[Address] = Field(default_factory=list)


@dataclass
class World:
    chain: LocalChain
    resolver: ResolverContract
    metadata: MetadataRenderer
    factories: List[LocalFactory] = field(default_factory=list)
    tlds: Dict[str, LocalTld] = field(default_factory=dict)

    @property
    def owner(self) -> str:
        return self.resolver.owner()


def build_world(
    snapshot: Union[SnapshotModel, dict],
    *,
    backend: Optional[StorageBackend] = None,
    join_policy: Optional[JoinPolicy] = None,
) -> World:
    """
    Materialize a snapshot. Admin state (factory list, deprecations, brands,
    descriptions) is written through the owner-gated entrypoints, so a
    persistent ``backend`` that already holds state is left untouched.
    """
    if isinstance(snapshot, dict):
        try:
            snapshot = SnapshotModel.model_validate(snapshot)
        except ValidationError as exc:
            raise SnapshotError("invalid snapshot", context={"errors": exc.errors(include_url=False)}) from exc

    chain = LocalChain()
    owner = snapshot.owner
    policy = join_policy or snapshot.join_policy
    metadata = MetadataRenderer(chain, backend=backend)
    resolver = ResolverContract(owner, chain, backend=backend, join_policy=policy)
    world = World(chain=chain, resolver=resolver, metadata=metadata)
    fresh = len(resolver.factories) == 0

    try:
        for fm in snapshot.factories:
            factory_owner = fm.owner or owner
            factory = LocalFactory(chain, factory_owner, fm.address)
            world.factories.append(factory)
            for tm in fm.tlds:
                tld = factory.create_tld(
                    factory_owner,
                    tm.name,
                    tm.owner or factory_owner,
                    address=tm.address,
                    metadata=metadata,
                )
                world.tlds[tld.address] = tld
                for dm in tm.domains:
                    tld.mint(dm.name, dm.holder, dm.data)
                for holder, default_name in tm.defaults.items():
                    tld.set_default_name(holder, default_name)
                if fresh and tm.brand:
                    metadata.set_brand(tld.owner(), tld.address, tm.brand)
                if fresh and tm.description:
                    metadata.set_description(tld.owner(), tld.address, tm.description)
    except ResolverError as exc:
        raise SnapshotError(str(exc), context={"cause": exc.code}) from exc
    except ValueError as exc:
        raise SnapshotError(str(exc)) from exc

    if fresh:
        order = snapshot.registry if snapshot.registry is not None else [f.address for f in world.factories]
        for addr in order:
            resolver.add_factory_address(owner, addr)
        for addr in snapshot.deprecated:
            resolver.add_deprecated_tld_address(owner, addr)
    else:
        log.info("state backend already populated; keeping stored registry and deprecations")

    log.info(
        "world ready: %d factories, %d tlds, %d registered",
        len(world.factories),
        len(world.tlds),
        len(resolver.factories),
    )
    return world


def load_snapshot(
    path: Union[str, Path],
    *,
    backend: Optional[StorageBackend] = None,
    join_policy: Optional[JoinPolicy] = None,
) -> World:
    p = Path(path).expanduser()
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SnapshotError(f"snapshot not found: {p}") from exc
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"snapshot is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise SnapshotError("snapshot root must be an object")
    return build_world(raw, backend=backend, join_policy=join_policy)


__all__ = [
    "DomainModel",
    "TldModel",
    "FactoryModel",
    "SnapshotModel",
    "World",
    "build_world",
    "load_snapshot",
]
