"""Adapters from live chains to the resolver's contract interfaces."""

from .evm import (
    CallReverted,
    EvmContractDirectory,
    EvmFactoryIndex,
    EvmResolverReader,
    EvmTldDirectory,
    JsonRpcClient,
)

__all__ = [
    "CallReverted",
    "EvmContractDirectory",
    "EvmFactoryIndex",
    "EvmResolverReader",
    "EvmTldDirectory",
    "JsonRpcClient",
]
