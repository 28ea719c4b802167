"""Passthrough step that registers every image the build touches."""

import logging
from pathlib import Path
from typing import Union

from .assets import AssetMap
from .naming import interpolate_name
from .registry import ImageDescriptor, ImageRegistry

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_NAME = "[contenthash].[ext]"


class ImageIngestor:
    def __init__(self, registry: ImageRegistry, assets: AssetMap, name: str = DEFAULT_IMAGE_NAME):
        self.registry = registry
        self.assets = assets
        self.name = name

    def ingest(self, source_path: Union[str, Path], query: str = "") -> ImageDescriptor:
        """Copy the image into the asset map under its hashed name and register it."""
        source_path = str(source_path)
        data = Path(source_path).read_bytes()
        file_name = interpolate_name(self.name, data, source_path)
        descriptor = ImageDescriptor(file_name, source_path, query, len(data))
        self.registry.register(file_name, descriptor)
        self.assets.insert(file_name, data)
        logger.debug("ingested %s%s as %s", source_path, query, file_name)
        return descriptor
