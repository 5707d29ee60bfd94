"""
tld_resolver.adapters.evm — read deployed contracts over EVM JSON-RPC.

Wraps factory, TLD and resolver contracts on a live chain behind the same
interfaces the local implementations expose, so ``CrossFactoryResolver`` can
run its scans off-chain against real state.

- Transport: ``httpx`` JSON-RPC 2.0 (``eth_call`` at ``latest``, ``eth_chainId``)
- Encoding: ``eth_abi`` for arguments/results, ``eth_utils`` for selectors

Failure handling
----------------
- Transport / HTTP / malformed responses raise ``AdapterError``.
- A call that reverts raises ``CallReverted``; the view wrappers below turn
  it into the empty result ("not found"), matching how the resolver degrades.
- A call to an address without code returns ``0x``; also "not found".

Usage:
    client = JsonRpcClient("https://rpc.blast.io")
    directory = EvmContractDirectory(client)
    onchain = EvmResolverReader(client, "0x...")
    resolver = CrossFactoryResolver(onchain, onchain, directory)
    resolver.resolve_owner("alice", ".wagmi")
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from tld_resolver.errors import AdapterError
from tld_resolver.interfaces import DomainRecord
from tld_resolver.runtime.context import ZERO_ADDRESS, AddressLike, checksum, normalize_address

log = logging.getLogger("tld_resolver.adapters.evm")


class CallReverted(AdapterError):
    default_code = "call_reverted"


def _is_revert(error: Dict[str, Any]) -> bool:
    # geth/anvil use code 3 with revert data; others use -32000 "execution reverted"
    msg = str(error.get("message", "")).lower()
    return error.get("code") == 3 or "revert" in msg


class JsonRpcClient:
    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)

    def request(self, method: str, params: Optional[list] = None) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params or []}
        try:
            resp = self._client.post(self.url, json=payload)
            resp.raise_for_status()
            parsed = resp.json()
        except httpx.HTTPError as exc:
            log.warning("json-rpc %s to %s failed: %s", method, self.url, exc)
            raise AdapterError(f"{method} failed: {exc}", context={"url": self.url}) from exc
        except ValueError as exc:
            raise AdapterError(f"{method} returned invalid JSON", context={"url": self.url}) from exc

        if not isinstance(parsed, dict):
            raise AdapterError(f"{method} returned a non-object response")
        if "error" in parsed:
            error = parsed["error"] if isinstance(parsed["error"], dict) else {"message": parsed["error"]}
            if _is_revert(error):
                raise CallReverted(str(error.get("message", "execution reverted")), context={"error": error})
            raise AdapterError(str(error.get("message", "json-rpc error")), context={"error": error})
        return parsed.get("result")

    def eth_call(self, to: AddressLike, data: bytes, block: str = "latest") -> bytes:
        result = self.request("eth_call", [{"to": checksum(to), "data": "0x" + data.hex()}, block])
        if not isinstance(result, str) or not result.startswith("0x"):
            raise AdapterError("eth_call returned a non-hex result", context={"result": result})
        try:
            return bytes.fromhex(result[2:])
        except ValueError as exc:
            raise AdapterError("eth_call returned malformed hex") from exc

    def chain_id(self) -> int:
        return int(self.request("eth_chainId"), 16)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "JsonRpcClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class EvmContract:
    """A deployed contract reachable through ``eth_call``."""

    def __init__(self, client: JsonRpcClient, address: AddressLike) -> None:
        self.client = client
        self.address = normalize_address(address)

    def call(
        self,
        signature: str,
        arg_types: Sequence[str],
        args: Sequence[Any],
        out_types: Sequence[str],
    ) -> Optional[tuple]:
        """
        Call ``signature`` and decode ``out_types``. Returns None when the
        target has no code (empty return data).
        """
        data = function_signature_to_4byte_selector(signature) + abi_encode(list(arg_types), list(args))
        raw = self.client.eth_call(self.address, data)
        if not raw:
            return None
        try:
            return tuple(abi_decode(list(out_types), raw))
        except DecodingError as exc:
            raise AdapterError(
                f"cannot decode {signature} result",
                context={"address": self.address, "len": len(raw)},
            ) from exc

    def view(self, signature: str, arg_types: Sequence[str], args: Sequence[Any], out_types: Sequence[str]) -> Optional[tuple]:
        """Like ``call`` but a revert reads as None."""
        try:
            return self.call(signature, arg_types, args, out_types)
        except CallReverted:
            log.debug("%s on %s reverted; treating as empty", signature, self.address)
            return None


def _addr(out: Optional[tuple]) -> str:
    return normalize_address(out[0]) if out else ZERO_ADDRESS


def _text(out: Optional[tuple]) -> str:
    return str(out[0]) if out else ""


class EvmOwnable(EvmContract):
    def owner(self) -> str:
        return _addr(self.view("owner()", [], [], ["address"]))


class EvmFactoryIndex(EvmContract):
    def tld_names_addresses(self, tld_name: str) -> str:
        return _addr(self.view("tldNamesAddresses(string)", ["string"], [tld_name], ["address"]))

    def get_tlds_array(self) -> List[str]:
        out = self.view("getTldsArray()", [], [], ["string[]"])
        return [str(n) for n in out[0]] if out else []


class EvmTldDirectory(EvmOwnable):
    def default_names(self, addr: str) -> str:
        return _text(self.view("defaultNames(address)", ["address"], [checksum(addr)], ["string"]))

    def get_domain_holder(self, domain_name: str) -> str:
        return _addr(self.view("getDomainHolder(string)", ["string"], [domain_name], ["address"]))

    def get_domain_data(self, domain_name: str) -> str:
        return _text(self.view("getDomainData(string)", ["string"], [domain_name], ["string"]))

    def domains(self, domain_name: str) -> DomainRecord:
        out = self.view("domains(string)", ["string"], [domain_name], ["string", "uint256", "address", "string"])
        if not out:
            return DomainRecord(name="", token_id=0, holder=ZERO_ADDRESS, data="")
        name, token_id, holder, data = out
        return DomainRecord(name=str(name), token_id=int(token_id), holder=normalize_address(holder), data=str(data))

    def token_uri(self, token_id: int) -> str:
        return _text(self.view("tokenURI(uint256)", ["uint256"], [int(token_id)], ["string"]))


class EvmContractDirectory:
    """``ContractDirectory`` over a live chain."""

    def __init__(self, client: JsonRpcClient) -> None:
        self.client = client

    def factory(self, addr: str) -> EvmFactoryIndex:
        return EvmFactoryIndex(self.client, addr)

    def tld(self, addr: str) -> EvmTldDirectory:
        return EvmTldDirectory(self.client, addr)

    def ownable(self, addr: str) -> EvmOwnable:
        return EvmOwnable(self.client, addr)


class EvmResolverReader(EvmContract):
    """
    The deployed resolver's admin state (factory list and deprecation flags),
    read fresh on every call. Serves as both ``FactorySource`` and
    ``DeprecationSource``.
    """

    def list(self) -> List[str]:
        out = self.view("getFactoriesArray()", [], [], ["address[]"])
        return [normalize_address(a) for a in out[0]] if out else []

    def is_deprecated(self, tld: AddressLike) -> bool:
        out = self.view("isTldDeprecated(address)", ["address"], [checksum(tld)], ["bool"])
        return bool(out[0]) if out else False


__all__ = [
    "CallReverted",
    "JsonRpcClient",
    "EvmContract",
    "EvmOwnable",
    "EvmFactoryIndex",
    "EvmTldDirectory",
    "EvmContractDirectory",
    "EvmResolverReader",
]
