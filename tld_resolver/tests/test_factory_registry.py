# -*- coding: utf-8 -*-
"""
Factory registry tests
- Owner-only append, preserved insertion order, duplicates allowed
- Swap-remove semantics (last element moves into the removed slot)
- Authorization is checked before the index bound
- Events carry the acting user and factory
"""
from __future__ import annotations

import pytest

from tld_resolver.contract import ResolverContract
from tld_resolver.errors import IndexOutOfRange, Unauthorized
from tld_resolver.local import LocalChain
from tld_resolver.registry.factories import EV_FACTORY_ADDED, EV_FACTORY_REMOVED
from tld_resolver.tests import MALLORY, OWNER

A = "0x" + "0a" * 20
B = "0x" + "0b" * 20
C = "0x" + "0c" * 20


@pytest.fixture()
def contract() -> ResolverContract:
    return ResolverContract(OWNER, LocalChain())


def test_add_appends_in_order(contract: ResolverContract):
    assert contract.get_factories_array() == []
    contract.add_factory_address(OWNER, A)
    contract.add_factory_address(OWNER, B)
    contract.add_factory_address(OWNER, C)
    assert contract.get_factories_array() == [A, B, C]
    assert len(contract.factories) == 3
    assert contract.factories.at(1) == B


def test_add_accepts_duplicates(contract: ResolverContract):
    contract.add_factory_address(OWNER, A)
    contract.add_factory_address(OWNER, A)
    assert contract.get_factories_array() == [A, A]


def test_add_normalizes_checksummed_input(contract: ResolverContract):
    mixed = "0x" + "Ab" * 20
    contract.add_factory_address(OWNER, mixed)
    assert contract.get_factories_array() == ["0x" + "ab" * 20]


def test_add_rejects_non_owner(contract: ResolverContract):
    with pytest.raises(Unauthorized):
        contract.add_factory_address(MALLORY, A)
    assert contract.get_factories_array() == []
    assert contract.events.named(EV_FACTORY_ADDED) == []


def test_add_emits_event(contract: ResolverContract):
    contract.add_factory_address(OWNER, A)
    (ev,) = contract.events.named(EV_FACTORY_ADDED)
    assert ev["user"] == OWNER
    assert ev["factory"] == A


def test_remove_swaps_last_into_slot(contract: ResolverContract):
    for f in (A, B, C):
        contract.add_factory_address(OWNER, f)
    contract.remove_factory_address(OWNER, 0)
    assert contract.get_factories_array() == [C, B]

    (ev,) = contract.events.named(EV_FACTORY_REMOVED)
    assert ev["factory"] == A
    assert ev["index"] == 0
    assert ev["user"] == OWNER


def test_remove_last_element_truncates(contract: ResolverContract):
    for f in (A, B, C):
        contract.add_factory_address(OWNER, f)
    contract.remove_factory_address(OWNER, 2)
    assert contract.get_factories_array() == [A, B]


def test_remove_only_element(contract: ResolverContract):
    contract.add_factory_address(OWNER, A)
    contract.remove_factory_address(OWNER, 0)
    assert contract.get_factories_array() == []
    assert len(contract.factories) == 0


@pytest.mark.parametrize("index", [3, 99, -1])
def test_remove_out_of_bounds(contract: ResolverContract, index: int):
    for f in (A, B, C):
        contract.add_factory_address(OWNER, f)
    with pytest.raises(IndexOutOfRange) as ei:
        contract.remove_factory_address(OWNER, index)
    assert "Index out of bounds" in str(ei.value)
    assert contract.get_factories_array() == [A, B, C]


def test_remove_on_empty_list(contract: ResolverContract):
    with pytest.raises(IndexOutOfRange):
        contract.remove_factory_address(OWNER, 0)


def test_remove_checks_authority_before_bounds(contract: ResolverContract):
    contract.add_factory_address(OWNER, A)
    with pytest.raises(Unauthorized):
        contract.remove_factory_address(MALLORY, 99)
    with pytest.raises(Unauthorized):
        contract.remove_factory_address(MALLORY, 0)
    assert contract.get_factories_array() == [A]


def test_ownership_transfer_moves_admin_rights(contract: ResolverContract):
    contract.transfer_ownership(OWNER, MALLORY)
    assert contract.owner() == MALLORY
    with pytest.raises(Unauthorized):
        contract.add_factory_address(OWNER, A)
    contract.add_factory_address(MALLORY, A)
    assert contract.get_factories_array() == [A]


def test_renounce_leaves_no_admin(contract: ResolverContract):
    contract.renounce_ownership(OWNER)
    with pytest.raises(Unauthorized):
        contract.add_factory_address(OWNER, A)
