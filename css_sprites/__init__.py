"""Pack small stylesheet background images into per-stylesheet sprites."""

from .assets import AssetMap
from .composer import CompositionResult, SpriteComposer
from .errors import (
    ConsistencyError,
    OptionsError,
    PackerError,
    SpriteError,
    StylesheetParseError,
)
from .ingest import ImageIngestor
from .layout import position_percent, size_percent
from .options import SpriteOptions
from .packer import PackResult, Placement, pack
from .registry import ImageDescriptor, ImageRegistry

__version__ = "0.1.0"

__all__ = [
    "AssetMap",
    "CompositionResult",
    "ConsistencyError",
    "ImageDescriptor",
    "ImageIngestor",
    "ImageRegistry",
    "OptionsError",
    "PackResult",
    "PackerError",
    "Placement",
    "SpriteComposer",
    "SpriteError",
    "SpriteOptions",
    "StylesheetParseError",
    "pack",
    "position_percent",
    "size_percent",
]
