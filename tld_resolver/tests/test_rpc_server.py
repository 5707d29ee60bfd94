from __future__ import annotations

from typing import Any, Optional, Tuple

from fastapi.testclient import TestClient

from tld_resolver.config import build_config
from tld_resolver.rpc import create_app
from tld_resolver.runtime.context import ZERO_ADDRESS
from tld_resolver.tests import ALICE, BOB, F1, F2, OWNER, make_world
from tld_resolver.version import __version__


def new_test_client() -> Tuple[TestClient, Any]:
    world = make_world()
    app = create_app(world.resolver, build_config())
    return TestClient(app), world


def rpc_call(client: TestClient, method: str, params: Optional[Any] = None, id: Any = 1) -> dict:
    payload = {"jsonrpc": "2.0", "method": method, "id": id}
    if params is not None:
        payload["params"] = params
    r = client.post("/rpc", json=payload)
    assert r.status_code == 200
    return r.json()


def test_health_and_version():
    client, _ = new_test_client()
    assert client.get("/healthz").json() == {"ok": True}
    body = client.get("/version").json()
    assert body["version"] == __version__


def test_forward_lookup_methods():
    client, world = new_test_client()
    assert rpc_call(client, "resolver.getDomainHolder", ["alice", ".wagmi"])["result"] == ALICE
    assert rpc_call(client, "resolver.getDomainHolder", {"domainName": "bob", "tld": ".punk"})["result"] == BOB
    assert rpc_call(client, "resolver.getDomainHolder", ["zed", ".wagmi"])["result"] == ZERO_ADDRESS
    assert rpc_call(client, "resolver.getDomainData", ["alice", ".wagmi"])["result"].startswith("{")
    assert rpc_call(client, "resolver.getDomainTokenUri", ["alice", ".wagmi"])["result"].startswith("data:application/json")
    assert rpc_call(client, "resolver.getTldAddress", [".wagmi"])["result"] == world.wagmi1.address
    assert rpc_call(client, "resolver.getTldFactoryAddress", [".degen"])["result"] == F2


def test_reverse_and_listing_methods():
    client, world = new_test_client()
    assert rpc_call(client, "resolver.getDefaultDomain", [ALICE, ".wagmi"])["result"] == "alice"
    assert rpc_call(client, "resolver.getDefaultDomains", [ALICE])["result"] == "alice.wagmi alice.degen"
    assert rpc_call(client, "resolver.getFirstDefaultDomain", [BOB])["result"] == "bob.punk"
    assert rpc_call(client, "resolver.getFactories")["result"] == [F1, F2]
    tlds = rpc_call(client, "resolver.getTlds")["result"]
    assert tlds.splitlines()[0] == f".wagmi,{world.wagmi1.address}"


def test_deprecation_visible_through_rpc():
    client, world = new_test_client()
    assert rpc_call(client, "resolver.isTldDeprecated", [world.punk.address])["result"] is False
    world.contract.add_deprecated_tld_address(OWNER, world.punk.address)
    assert rpc_call(client, "resolver.isTldDeprecated", [world.punk.address])["result"] is True
    assert rpc_call(client, "resolver.getDomainHolder", ["bob", ".punk"])["result"] == ZERO_ADDRESS


def test_list_methods():
    client, _ = new_test_client()
    names = rpc_call(client, "rpc.listMethods")["result"]
    assert "resolver.getDefaultDomains" in names
    assert names == sorted(names)


def test_bad_address_is_invalid_params():
    client, _ = new_test_client()
    res = rpc_call(client, "resolver.getDefaultDomains", ["0x1234"])
    assert res["error"]["code"] == -32602
    assert res["error"]["data"]["reason"] == "bad_address"


def test_wrong_arity_is_invalid_params():
    client, _ = new_test_client()
    res = rpc_call(client, "resolver.getDomainHolder", ["alice"], id="abc")
    assert res["id"] == "abc"
    assert res["error"]["code"] == -32602


def test_method_not_found():
    client, _ = new_test_client()
    res = rpc_call(client, "resolver.nope", [], id=42)
    assert res["id"] == 42
    assert res["error"]["code"] == -32601


def test_parse_error_on_malformed_json():
    client, _ = new_test_client()
    r = client.post("/rpc", content=b"{ bad json", headers={"content-type": "application/json"})
    assert r.status_code == 200
    data = r.json()
    assert data["id"] is None
    assert data["error"]["code"] == -32700


def test_batch_and_notifications():
    client, _ = new_test_client()
    batch = [
        {"jsonrpc": "2.0", "method": "resolver.getFirstDefaultDomain", "params": [ALICE], "id": 1},
        {"jsonrpc": "2.0", "method": "resolver.getFactories"},
        {"jsonrpc": "2.0", "method": "nope", "id": 3},
        "garbage",
    ]
    out = client.post("/rpc", json=batch).json()
    assert [o["id"] for o in out] == [1, 3, None]
    assert out[0]["result"] == "alice.wagmi"
    assert out[1]["error"]["code"] == -32601
    assert out[2]["error"]["code"] == -32600

    r = client.post("/rpc", json={"jsonrpc": "2.0", "method": "resolver.getFactories"})
    assert r.status_code == 204


def test_empty_batch_is_invalid():
    client, _ = new_test_client()
    data = client.post("/rpc", json=[]).json()
    assert data["error"]["code"] == -32600


def test_metrics_count_rpc_calls():
    client, _ = new_test_client()
    rpc_call(client, "resolver.getFactories")
    rpc_call(client, "resolver.getDefaultDomains", ["0x1234"])
    r = client.get("/metrics")
    assert r.status_code == 200
    body = r.text
    assert 'tld_resolver_jsonrpc_requests_total{method="resolver.getFactories",status="ok",code="0"}' in body
    assert 'method="resolver.getDefaultDomains",status="error",code="bad_address"' in body
    assert 'tld_resolver_http_requests_total{method="POST",path="/rpc",status="200"}' in body


def test_metrics_collapse_unknown_routes():
    client, _ = new_test_client()
    assert client.get("/no-such-route").status_code == 404
    body = client.get("/metrics").text
    assert 'tld_resolver_http_requests_total{method="GET",path="/other",status="404"}' in body
    assert "/no-such-route" not in body
