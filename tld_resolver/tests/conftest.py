from __future__ import annotations

import os
from types import SimpleNamespace

import pytest
from hypothesis import HealthCheck, settings

from tld_resolver.config import JoinPolicy, load_config
from tld_resolver.tests import make_world

# Local: fewer examples for snappy feedback; CI: more coverage. No deadline to avoid flakiness.
settings.register_profile(
    "local",
    settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture]),
)
settings.register_profile(
    "ci",
    settings(max_examples=200, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture]),
)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE") or ("ci" if os.environ.get("CI") else "local"))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # Keep host env from leaking into config-driven code paths.
    for key in list(os.environ):
        if key.startswith("TLD_RESOLVER_"):
            monkeypatch.delenv(key, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture()
def world() -> SimpleNamespace:
    return make_world()


@pytest.fixture()
def compact_world() -> SimpleNamespace:
    return make_world(JoinPolicy.COMPACT)
