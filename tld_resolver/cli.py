"""
tld-resolver — query a cross-factory resolver from the command line.

Two sources are supported:
  --snapshot PATH                 offline world loaded from a JSON snapshot
  --rpc-url URL --resolver 0x...  a deployed resolver on an EVM chain

Commands:
  tld-resolver owner alice .wagmi          holder of alice.wagmi
  tld-resolver data alice .wagmi           record data
  tld-resolver uri alice .wagmi            token URI
  tld-resolver tld .wagmi                  TLD contract address
  tld-resolver factory .wagmi              factory that created the TLD
  tld-resolver default 0x... .wagmi        default name in one TLD
  tld-resolver defaults 0x...              all default domains
  tld-resolver first-default 0x...         first default domain
  tld-resolver tlds                        active TLDs, one per line
  tld-resolver factories                   registered factories
  tld-resolver serve                       JSON-RPC service over the same source

Global options go before the command:
  tld-resolver --snapshot world.json owner alice .wagmi
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer

from tld_resolver.adapters.evm import EvmContractDirectory, EvmResolverReader, JsonRpcClient
from tld_resolver.config import JoinPolicy, ResolverConfig, load_config
from tld_resolver.errors import ResolverError
from tld_resolver.local.snapshot import load_snapshot
from tld_resolver.resolver import CrossFactoryResolver
from tld_resolver.runtime.storage import open_backend

log = logging.getLogger("tld_resolver.cli")

app = typer.Typer(
    name="tld-resolver",
    help="Cross-factory TLD resolver queries",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalContext:
    def __init__(self) -> None:
        self.cfg: ResolverConfig = load_config()
        self.snapshot: Optional[Path] = None
        self.json_output: bool = False
        self._resolver: Optional[CrossFactoryResolver] = None

    def resolver(self) -> CrossFactoryResolver:
        if self._resolver is None:
            self._resolver = _build_resolver(self.cfg, self.snapshot)
        return self._resolver


def _build_resolver(cfg: ResolverConfig, snapshot: Optional[Path]) -> CrossFactoryResolver:
    if snapshot is not None:
        backend = open_backend(cfg.state_path)
        world = load_snapshot(snapshot, backend=backend, join_policy=cfg.join_policy)
        return world.resolver.resolver

    if not cfg.resolver_address:
        typer.echo("Error: pass --snapshot, or --resolver with a deployed resolver address", err=True)
        raise typer.Exit(2)
    client = JsonRpcClient(cfg.rpc_url, timeout=cfg.rpc_timeout)
    reader = EvmResolverReader(client, cfg.resolver_address)
    log.debug("reading resolver %s via %s", reader.address, cfg.rpc_url)
    policy = cfg.join_policy or JoinPolicy.REFERENCE
    return CrossFactoryResolver(reader, reader, EvmContractDirectory(client), policy)


def _state(ctx: typer.Context) -> GlobalContext:
    return ctx.ensure_object(GlobalContext)


def _emit(ctx: typer.Context, value: Any) -> None:
    if _state(ctx).json_output:
        typer.echo(json.dumps(value, ensure_ascii=False))
    elif isinstance(value, list):
        for item in value:
            typer.echo(item)
    elif isinstance(value, str) and value.endswith("\n"):
        typer.echo(value, nl=False)
    else:
        typer.echo(value)


def _run(ctx: typer.Context, fn) -> None:
    try:
        _emit(ctx, fn(_state(ctx).resolver()))
    except ResolverError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.callback()
def main_callback(
    ctx: typer.Context,
    snapshot: Optional[Path] = typer.Option(
        None,
        "--snapshot",
        help="JSON world snapshot to query offline",
        exists=True,
        dir_okay=False,
    ),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="EVM JSON-RPC endpoint"),
    resolver: Optional[str] = typer.Option(None, "--resolver", help="Deployed resolver address"),
    join_policy: Optional[JoinPolicy] = typer.Option(
        None,
        "--join-policy",
        help="Separator handling for 'defaults'",
        case_sensitive=False,
    ),
    state: Optional[Path] = typer.Option(None, "--state", help="SQLite file for resolver admin state"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Cross-factory TLD resolver queries."""
    g = _state(ctx)
    g.cfg = g.cfg.with_overrides(
        rpc_url=rpc_url,
        resolver_address=resolver,
        join_policy=join_policy,
        state_path=state,
        log_level="DEBUG" if verbose else None,
    )
    g.snapshot = snapshot
    g.json_output = json_output
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=getattr(logging, g.cfg.log_level, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@app.command()
def owner(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain name without TLD (e.g. alice)"),
    tld: str = typer.Argument(..., help="TLD with leading dot (e.g. .wagmi)"),
) -> None:
    """Holder of DOMAIN in TLD (zero address if not found)."""
    _run(ctx, lambda r: r.resolve_owner(domain, tld))


@app.command()
def data(
    ctx: typer.Context,
    domain: str = typer.Argument(...),
    tld: str = typer.Argument(...),
) -> None:
    """Data string stored on DOMAIN."""
    _run(ctx, lambda r: r.resolve_data(domain, tld))


@app.command()
def uri(
    ctx: typer.Context,
    domain: str = typer.Argument(...),
    tld: str = typer.Argument(...),
) -> None:
    """Token URI of DOMAIN."""
    _run(ctx, lambda r: r.resolve_token_uri(domain, tld))


@app.command("tld")
def tld_address(ctx: typer.Context, tld: str = typer.Argument(...)) -> None:
    """Contract address bound to TLD."""
    _run(ctx, lambda r: r.resolve_tld_contract(tld))


@app.command()
def factory(ctx: typer.Context, tld: str = typer.Argument(...)) -> None:
    """Factory that created TLD."""
    _run(ctx, lambda r: r.resolve_tld_factory(tld))


@app.command()
def default(
    ctx: typer.Context,
    address: str = typer.Argument(..., help="Holder address (0x...)"),
    tld: str = typer.Argument(...),
) -> None:
    """Default name of ADDRESS in TLD, without the suffix."""
    _run(ctx, lambda r: r.get_default_domain(address, tld))


@app.command()
def defaults(ctx: typer.Context, address: str = typer.Argument(...)) -> None:
    """Every default domain of ADDRESS, space separated."""
    _run(ctx, lambda r: r.get_default_domains(address))


@app.command("first-default")
def first_default(ctx: typer.Context, address: str = typer.Argument(...)) -> None:
    """First default domain of ADDRESS across all TLDs."""
    _run(ctx, lambda r: r.get_first_default_domain(address))


@app.command()
def tlds(ctx: typer.Context) -> None:
    """Active TLDs as name,address rows."""
    _run(ctx, lambda r: r.list_active_tlds())


@app.command()
def factories(ctx: typer.Context) -> None:
    """Registered factory addresses in order."""
    _run(ctx, lambda r: r.factories.list())


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Bind host"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
) -> None:
    """Serve the resolver over JSON-RPC."""
    import uvicorn

    from tld_resolver.rpc.server import create_app

    g = _state(ctx)
    cfg = g.cfg.with_overrides(host=host, port=port)
    try:
        fastapi_app = create_app(g.resolver(), cfg)
    except ResolverError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    uvicorn.run(fastapi_app, host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
