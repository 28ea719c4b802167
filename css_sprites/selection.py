"""Decide which extracted references go into a stylesheet's sprite."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .extractor import ImageReference
from .options import SpriteOptions
from .registry import ImageRegistry

logger = logging.getLogger(__name__)

MIN_SPRITE_IMAGES = 2


def filter_references(refs: List[ImageReference], registry: ImageRegistry,
                      sizes: Mapping[str, int], options: SpriteOptions) -> List[ImageReference]:
    """Keep references to registered images that pass the query and size rules.

    Survivors get their :class:`ImageDescriptor` attached.
    """
    kept = []
    for ref in refs:
        descriptor = registry.lookup(ref.image_file_name)
        size = sizes.get(ref.image_file_name)
        if descriptor is None or size is None:
            logger.debug("skip %s: image was not ingested", ref.url_path)
            continue
        if options.filter == "query" and options.params not in descriptor.query:
            logger.debug("skip %s: query %r lacks %r", ref.url_path, descriptor.query, options.params)
            continue
        if size >= options.limit:
            logger.debug("skip %s: %d bytes, limit %d", ref.url_path, size, options.limit)
            continue
        ref.descriptor = descriptor
        kept.append(ref)
    return kept


@dataclass
class SpriteBatch:
    """Distinct packer inputs plus every reference that will be rewritten."""

    sources: List[str]
    references: List[ImageReference]
    file_names: Dict[str, List[str]] = field(default_factory=dict)

    def consumed_file_names(self) -> List[str]:
        return [name for source in self.sources for name in self.file_names[source]]


def group_by_source(refs: List[ImageReference]) -> Optional[SpriteBatch]:
    """Collapse filtered references by source path.

    Returns ``None`` when fewer than two distinct images remain, in which
    case the stylesheet is left alone.
    """
    file_names: Dict[str, List[str]] = {}
    for ref in refs:
        names = file_names.setdefault(ref.descriptor.source_path, [])
        if ref.image_file_name not in names:
            names.append(ref.image_file_name)

    if len(file_names) < MIN_SPRITE_IMAGES:
        return None
    return SpriteBatch(list(file_names), list(refs), file_names)
