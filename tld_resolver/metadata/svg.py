"""
SVG image and data-URI helpers for domain NFT metadata.

The image is a fixed 500x500 template: gradient background, the full domain
name centred, the TLD brand underneath. Text is XML-escaped.
"""

from __future__ import annotations

import base64
from xml.sax.saxutils import escape

SVG_DATA_URI_PREFIX = "data:image/svg+xml;base64,"
JSON_DATA_URI_PREFIX = "data:application/json;base64,"

_SVG_TEMPLATE = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 500 500" width="500" height="500">'
    '<defs><linearGradient id="grad">'
    '<stop offset="0%" stop-color="#ee9d4e"/><stop offset="100%" stop-color="#a93e03"/>'
    "</linearGradient></defs>"
    '<rect x="0" y="0" width="500" height="500" fill="url(#grad)"/>'
    '<text x="50%" y="50%" dominant-baseline="middle" fill="white" text-anchor="middle" font-size="x-large">'
    "{full_name}</text>"
    '<text x="50%" y="70%" dominant-baseline="middle" fill="white" text-anchor="middle">'
    "{brand}</text>"
    "</svg>"
)


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def render_svg(full_name: str, brand: str) -> str:
    return _SVG_TEMPLATE.format(full_name=escape(full_name), brand=escape(brand))


def svg_data_uri(full_name: str, brand: str) -> str:
    return SVG_DATA_URI_PREFIX + b64(render_svg(full_name, brand))


def decode_data_uri(uri: str) -> str:
    """Inverse of the base64 data-URI wrapping (either prefix)."""
    for prefix in (JSON_DATA_URI_PREFIX, SVG_DATA_URI_PREFIX):
        if uri.startswith(prefix):
            return base64.b64decode(uri[len(prefix):]).decode("utf-8")
    raise ValueError("not a base64 json/svg data uri")


__all__ = [
    "SVG_DATA_URI_PREFIX",
    "JSON_DATA_URI_PREFIX",
    "b64",
    "render_svg",
    "svg_data_uri",
    "decode_data_uri",
]
