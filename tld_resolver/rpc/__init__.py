"""JSON-RPC read service for the resolver."""

from .server import create_app

__all__ = ["create_app"]
