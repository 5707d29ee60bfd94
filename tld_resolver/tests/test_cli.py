"""
CLI tests: every query command against a snapshot file, plus the live-chain
path through a mocked JSON-RPC node.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
import typer.testing
from eth_abi import encode

from tld_resolver import cli
from tld_resolver.cli import app
from tld_resolver.runtime.context import ZERO_ADDRESS
from tld_resolver.tests import ALICE, BOB, F1, F2, snapshot_dict

runner = typer.testing.CliRunner()


@pytest.fixture()
def snapshot_file(tmp_path: Path) -> Path:
    p = tmp_path / "world.json"
    p.write_text(json.dumps(snapshot_dict()), encoding="utf-8")
    return p


def _run(snapshot_file: Path, *args: str):
    return runner.invoke(app, ["--snapshot", str(snapshot_file), *args])


def test_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for cmd in ("owner", "defaults", "first-default", "tlds", "serve"):
        assert cmd in result.stdout


def test_forward_commands(snapshot_file: Path):
    r = _run(snapshot_file, "owner", "alice", ".wagmi")
    assert r.exit_code == 0, r.output
    assert r.stdout.strip() == ALICE

    assert _run(snapshot_file, "owner", "nobody", ".wagmi").stdout.strip() == ZERO_ADDRESS
    assert _run(snapshot_file, "data", "alice", ".wagmi").stdout.strip() == '{"url":"https://alice.example"}'
    assert _run(snapshot_file, "uri", "alice", ".wagmi").stdout.startswith("data:application/json;base64,")
    assert _run(snapshot_file, "factory", ".degen").stdout.strip() == F2
    assert _run(snapshot_file, "tld", ".nope").stdout.strip() == ZERO_ADDRESS


def test_reverse_commands(snapshot_file: Path):
    assert _run(snapshot_file, "default", ALICE, ".wagmi").stdout == "alice\n"
    assert _run(snapshot_file, "defaults", ALICE).stdout == "alice.wagmi alice.degen\n"
    assert _run(snapshot_file, "defaults", BOB).stdout == "bob.punk \n"
    assert _run(snapshot_file, "first-default", BOB).stdout == "bob.punk\n"


def test_join_policy_flag(snapshot_file: Path):
    r = runner.invoke(app, ["--snapshot", str(snapshot_file), "--join-policy", "compact", "defaults", BOB])
    assert r.exit_code == 0, r.output
    assert r.stdout == "bob.punk\n"


def test_snapshot_join_policy_applies_unless_overridden(tmp_path: Path):
    p = tmp_path / "compact.json"
    p.write_text(json.dumps(dict(snapshot_dict(), join_policy="compact")), encoding="utf-8")

    assert _run(p, "defaults", BOB).stdout == "bob.punk\n"
    assert json.loads(_run(p, "--json", "defaults", BOB).stdout) == "bob.punk"

    forced = runner.invoke(app, ["--snapshot", str(p), "--join-policy", "reference", "defaults", BOB])
    assert forced.exit_code == 0, forced.output
    assert forced.stdout == "bob.punk \n"


def test_listing_commands(snapshot_file: Path):
    out = _run(snapshot_file, "tlds").stdout
    rows = out.splitlines()
    assert len(rows) == 4
    assert all(row.count(",") == 1 for row in rows)
    assert out.endswith("\n") and not out.endswith("\n\n")

    assert _run(snapshot_file, "factories").stdout.split() == [F1, F2]
    as_json = runner.invoke(app, ["--snapshot", str(snapshot_file), "--json", "factories"])
    assert json.loads(as_json.stdout) == [F1, F2]


def test_bad_address_exits_nonzero(snapshot_file: Path):
    r = _run(snapshot_file, "defaults", "0x1234")
    assert r.exit_code == 1


def test_bad_snapshot_exits_nonzero(tmp_path: Path):
    p = tmp_path / "bad.json"
    p.write_text('{"owner": "nope"}', encoding="utf-8")
    r = runner.invoke(app, ["--snapshot", str(p), "factories"])
    assert r.exit_code == 1


def test_missing_source_is_usage_error():
    r = runner.invoke(app, ["factories"])
    assert r.exit_code == 2


def test_state_file_persists_admin_state(snapshot_file: Path, tmp_path: Path):
    state = tmp_path / "state.db"
    r = runner.invoke(app, ["--snapshot", str(snapshot_file), "--state", str(state), "factories"])
    assert r.exit_code == 0, r.output
    assert state.exists()


def test_live_chain_mode(monkeypatch):
    resolver = "0x" + "5e" * 20
    factories = "0x" + encode(["address[]"], [[F1]]).hex()

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        call = body["params"][0]
        result = factories if call["to"].lower() == resolver else "0x"
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    real_client = cli.JsonRpcClient
    monkeypatch.setattr(
        cli,
        "JsonRpcClient",
        lambda url, timeout: real_client(url, timeout=timeout, transport=httpx.MockTransport(handler)),
    )
    r = runner.invoke(app, ["--resolver", resolver, "--rpc-url", "http://node.test", "factories"])
    assert r.exit_code == 0, r.output
    assert r.stdout.split() == [F1]

    r = runner.invoke(app, ["--resolver", resolver, "owner", "alice", ".wagmi"])
    assert r.stdout.strip() == ZERO_ADDRESS
