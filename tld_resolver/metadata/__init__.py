"""Token metadata for domain NFTs."""

from .renderer import MetadataRenderer
from .svg import decode_data_uri, render_svg

__all__ = ["MetadataRenderer", "decode_data_uri", "render_svg"]
