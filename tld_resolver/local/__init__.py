"""
Local, in-memory implementations of the contracts the resolver consumes,
plus the snapshot loader that wires them into a queryable world.
"""

from .chain import LocalChain, derive_address
from .factory import LocalFactory
from .snapshot import World, build_world, load_snapshot
from .tld import LocalTld

__all__ = [
    "LocalChain",
    "LocalFactory",
    "LocalTld",
    "World",
    "build_world",
    "derive_address",
    "load_snapshot",
]
