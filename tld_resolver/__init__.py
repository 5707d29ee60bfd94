"""
tld_resolver — cross-factory name resolution for multi-TLD domain systems.

Main entrypoints:
- ``ResolverContract``      owner-gated factory list + deprecation map + queries
- ``CrossFactoryResolver``  the scan logic, usable over any factory/deprecation source
- ``MetadataRenderer``      per-TLD brand/description and token-URI rendering
"""

from tld_resolver.config import JoinPolicy, ResolverConfig, load_config
from tld_resolver.contract import ResolverContract
from tld_resolver.errors import IndexOutOfRange, ResolverError, Unauthorized
from tld_resolver.metadata import MetadataRenderer
from tld_resolver.resolver import CrossFactoryResolver
from tld_resolver.runtime import ZERO_ADDRESS, CallContext
from tld_resolver.version import __version__

__all__ = [
    "CallContext",
    "CrossFactoryResolver",
    "IndexOutOfRange",
    "JoinPolicy",
    "MetadataRenderer",
    "ResolverConfig",
    "ResolverContract",
    "ResolverError",
    "Unauthorized",
    "ZERO_ADDRESS",
    "load_config",
    "__version__",
]
