"""
``resolver.*`` JSON-RPC methods. Names follow the deployed resolver's view
functions so existing clients can point at this service unchanged.

All methods are read-only and bound to one ``CrossFactoryResolver``.
"""

from __future__ import annotations

from typing import List

from tld_resolver.resolver import CrossFactoryResolver
from tld_resolver.rpc.jsonrpc import MethodRegistry
from tld_resolver.runtime.context import normalize_address
from tld_resolver.version import __version__


def build_registry(resolver: CrossFactoryResolver) -> MethodRegistry:
    registry = MethodRegistry()
    m = registry.method

    @m("resolver.getDomainHolder")
    def get_domain_holder(domainName: str, tld: str) -> str:
        return resolver.resolve_owner(domainName, tld)

    @m("resolver.getDomainData")
    def get_domain_data(domainName: str, tld: str) -> str:
        return resolver.resolve_data(domainName, tld)

    @m("resolver.getDomainTokenUri")
    def get_domain_token_uri(domainName: str, tld: str) -> str:
        return resolver.resolve_token_uri(domainName, tld)

    @m("resolver.getTldAddress")
    def get_tld_address(tldName: str) -> str:
        return resolver.resolve_tld_contract(tldName)

    @m("resolver.getTldFactoryAddress")
    def get_tld_factory_address(tldName: str) -> str:
        return resolver.resolve_tld_factory(tldName)

    @m("resolver.getDefaultDomain")
    def get_default_domain(addr: str, tld: str) -> str:
        return resolver.get_default_domain(addr, tld)

    @m("resolver.getDefaultDomains")
    def get_default_domains(addr: str) -> str:
        return resolver.get_default_domains(addr)

    @m("resolver.getFirstDefaultDomain")
    def get_first_default_domain(addr: str) -> str:
        return resolver.get_first_default_domain(addr)

    @m("resolver.getTlds")
    def get_tlds() -> str:
        return resolver.list_active_tlds()

    @m("resolver.getFactories")
    def get_factories() -> List[str]:
        return resolver.factories.list()

    @m("resolver.isTldDeprecated")
    def is_tld_deprecated(tldAddress: str) -> bool:
        return resolver.deprecations.is_deprecated(normalize_address(tldAddress))

    @m("rpc.listMethods")
    def list_methods() -> List[str]:
        return registry.names

    @m("rpc.version")
    def version() -> str:
        return __version__

    return registry


__all__ = ["build_registry"]
