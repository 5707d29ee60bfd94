# -*- coding: utf-8 -*-
"""
Test helpers: a small two-factory world wired through ``LocalChain``.

    F1 (index 0): .wagmi, .punk
    F2 (index 1): .wagmi (shadowed by F1's), .degen

alice holds alice.wagmi (via F1) and alice.degen; bob holds bob.punk;
carol holds the shadowed alice.wagmi in F2.
"""
from __future__ import annotations

from types import SimpleNamespace

from tld_resolver.config import JoinPolicy
from tld_resolver.contract import ResolverContract
from tld_resolver.local import LocalChain, LocalFactory
from tld_resolver.metadata import MetadataRenderer

OWNER = "0x" + "aa" * 20
ALICE = "0x" + "01" * 20
BOB = "0x" + "02" * 20
CAROL = "0x" + "03" * 20
MALLORY = "0x" + "ee" * 20

F1 = "0x" + "f1" * 20
F2 = "0x" + "f2" * 20


def make_world(join_policy: JoinPolicy = JoinPolicy.REFERENCE) -> SimpleNamespace:
    chain = LocalChain()
    metadata = MetadataRenderer(chain)
    contract = ResolverContract(OWNER, chain, join_policy=join_policy)

    f1 = LocalFactory(chain, OWNER, F1)
    f2 = LocalFactory(chain, OWNER, F2)
    wagmi1 = f1.create_tld(OWNER, ".wagmi", metadata=metadata)
    punk = f1.create_tld(OWNER, ".punk", metadata=metadata)
    wagmi2 = f2.create_tld(OWNER, ".wagmi", metadata=metadata)
    degen = f2.create_tld(OWNER, ".degen", metadata=metadata)

    wagmi1.mint("alice", ALICE, '{"url":"https://alice.example"}')
    wagmi2.mint("alice", CAROL, "shadowed")
    degen.mint("alice", ALICE)
    punk.mint("bob", BOB)

    contract.add_factory_address(OWNER, F1)
    contract.add_factory_address(OWNER, F2)

    return SimpleNamespace(
        chain=chain,
        metadata=metadata,
        contract=contract,
        resolver=contract.resolver,
        f1=f1,
        f2=f2,
        wagmi1=wagmi1,
        wagmi2=wagmi2,
        punk=punk,
        degen=degen,
    )


def snapshot_dict() -> dict:
    """The same world as ``make_world`` in snapshot form."""
    return {
        "owner": OWNER,
        "factories": [
            {
                "address": F1,
                "tlds": [
                    {
                        "name": ".wagmi",
                        "brand": "Wagmi Names",
                        "description": "Domains for the wagmi crowd",
                        "domains": [{"name": "alice", "holder": ALICE, "data": '{"url":"https://alice.example"}'}],
                    },
                    {"name": ".punk", "domains": [{"name": "bob", "holder": BOB}]},
                ],
            },
            {
                "address": F2,
                "tlds": [
                    {"name": ".wagmi", "domains": [{"name": "alice", "holder": CAROL, "data": "shadowed"}]},
                    {"name": ".degen", "domains": [{"name": "alice", "holder": ALICE}]},
                ],
            },
        ],
    }
