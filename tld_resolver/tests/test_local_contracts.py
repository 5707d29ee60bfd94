# -*- coding: utf-8 -*-
"""
Local factory/TLD contract tests
- TLD creation is owner-only and validates names
- Minting assigns increasing token ids and a first default name
- Holder-only edits; unknown addresses behave like empty contracts
"""
from __future__ import annotations

import pytest

from tld_resolver.errors import ResolverError, Unauthorized
from tld_resolver.local import LocalChain, LocalFactory, derive_address
from tld_resolver.local.factory import check_tld_name
from tld_resolver.local.tld import EV_DOMAIN_CREATED
from tld_resolver.runtime.context import ZERO_ADDRESS
from tld_resolver.tests import ALICE, BOB, MALLORY, OWNER


@pytest.fixture()
def factory() -> LocalFactory:
    return LocalFactory(LocalChain(), OWNER)


def test_create_tld_binds_and_enumerates(factory: LocalFactory):
    a = factory.create_tld(OWNER, ".wagmi")
    b = factory.create_tld(OWNER, ".Punk", BOB)
    assert factory.get_tlds_array() == [".wagmi", ".punk"]
    assert factory.tld_names_addresses(".wagmi") == a.address
    assert factory.tld_names_addresses(".punk") == b.address
    assert factory.tld_names_addresses(".nope") == ZERO_ADDRESS
    assert a.owner() == OWNER
    assert b.owner() == BOB


def test_create_tld_rejects_non_owner_and_duplicates(factory: LocalFactory):
    with pytest.raises(Unauthorized):
        factory.create_tld(MALLORY, ".wagmi")
    factory.create_tld(OWNER, ".wagmi")
    with pytest.raises(ResolverError) as ei:
        factory.create_tld(OWNER, ".wagmi")
    assert ei.value.code == "tld_exists"


@pytest.mark.parametrize("name", ["wagmi", ".", ".a.b", ". x", ""])
def test_bad_tld_names(name: str):
    with pytest.raises(ResolverError) as ei:
        check_tld_name(name)
    assert ei.value.code == "bad_tld"


def test_mint_and_views(factory: LocalFactory):
    tld = factory.create_tld(OWNER, ".wagmi")
    assert tld.mint("Alice", ALICE, "d") == 1
    assert tld.mint("second", ALICE) == 2
    assert tld.get_domain_holder("alice") == ALICE
    assert tld.get_domain_data("alice") == "d"
    assert tld.domains("alice").token_id == 1
    assert tld.default_names(ALICE) == "alice"
    assert tld.domain_names() == ["alice", "second"]
    assert tld.events.named(EV_DOMAIN_CREATED)[0]["token_id"] == 1

    assert tld.get_domain_holder("ghost") == ZERO_ADDRESS
    assert tld.domains("ghost").token_id == 0
    assert tld.token_uri(0) == ""


def test_mint_rejects_taken_and_bad_labels(factory: LocalFactory):
    tld = factory.create_tld(OWNER, ".wagmi")
    tld.mint("alice", ALICE)
    with pytest.raises(ResolverError) as ei:
        tld.mint("ALICE", BOB)
    assert ei.value.code == "domain_taken"
    for bad in ("a.b", "a b", ""):
        with pytest.raises(ResolverError):
            tld.mint(bad, BOB)


def test_holder_only_edits(factory: LocalFactory):
    tld = factory.create_tld(OWNER, ".wagmi")
    tld.mint("alice", ALICE)
    tld.mint("bob", BOB)
    with pytest.raises(Unauthorized):
        tld.edit_data(BOB, "alice", "x")
    with pytest.raises(Unauthorized):
        tld.edit_default_domain(ALICE, "bob")
    tld.edit_data(ALICE, "alice", "new")
    assert tld.get_domain_data("alice") == "new"


def test_tld_ownership_transfer(factory: LocalFactory):
    tld = factory.create_tld(OWNER, ".wagmi")
    with pytest.raises(Unauthorized):
        tld.transfer_ownership(MALLORY, MALLORY)
    tld.transfer_ownership(OWNER, ALICE)
    assert tld.owner() == ALICE


def test_chain_membership_and_empty_contracts():
    chain = LocalChain()
    f = LocalFactory(chain, OWNER)
    assert f.address in chain
    assert "not an address" not in chain
    empty = chain.at("0x" + "99" * 20)
    assert empty.owner() == ZERO_ADDRESS
    assert empty.get_tlds_array() == []
    assert empty.default_names(ALICE) == ""


def test_address_collision_rejected():
    chain = LocalChain()
    addr = derive_address("fixed")
    LocalFactory(chain, OWNER, addr)
    with pytest.raises(ValueError):
        LocalFactory(chain, OWNER, addr)


def test_wrong_contract_kind_reads_as_empty(factory: LocalFactory):
    chain = factory.chain
    tld = factory.create_tld(OWNER, ".wagmi")
    tld.mint("alice", ALICE)

    as_factory = chain.factory(tld.address)
    assert as_factory.get_tlds_array() == []
    assert as_factory.tld_names_addresses(".wagmi") == ZERO_ADDRESS

    as_tld = chain.tld(factory.address)
    assert as_tld.default_names(ALICE) == ""
    assert as_tld.get_domain_holder("alice") == ZERO_ADDRESS

    assert chain.ownable(tld.address).owner() == OWNER
    assert chain.tld(tld.address) is tld
    assert chain.factory(factory.address) is factory
