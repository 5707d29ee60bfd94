"""Owner-managed registries backing the resolver."""

from .deprecation import DeprecationRegistry
from .factories import FactoryRegistry
from .ownable import OwnableAuthority

__all__ = ["DeprecationRegistry", "FactoryRegistry", "OwnableAuthority"]
