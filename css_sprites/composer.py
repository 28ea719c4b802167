"""Compose one sprite per stylesheet and rewrite the stylesheet to use it."""

import concurrent.futures as cf
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Sequence

from .assets import AssetMap
from .extractor import extract_references
from .naming import interpolate_name
from .options import SpriteOptions
from .packer import PackResult, pack
from .registry import ImageRegistry
from .rewriter import rewrite_references
from .selection import SpriteBatch, filter_references, group_by_source
from .stylesheet import Stylesheet

logger = logging.getLogger(__name__)

Packer = Callable[[Sequence[str], str, int], PackResult]


@dataclass
class CompositionResult:
    stylesheet: str
    sprite_name: str
    images: List[str]
    references: int
    removed: List[str] = field(default_factory=list)


class SpriteComposer:
    """Run sprite composition over every stylesheet in an asset map.

    *registry* must already hold every ingested image. *packer* is called
    once per stylesheet as ``packer(sources, algorithm, padding)``.
    """

    def __init__(self, registry: ImageRegistry, options: Optional[SpriteOptions] = None,
                 packer: Packer = pack, max_workers: Optional[int] = None):
        self.registry = registry
        self.options = options or SpriteOptions()
        self.packer = packer
        self.max_workers = max_workers
        logger.debug("options: %s", self.options)

    def compose(self, assets: AssetMap) -> List[CompositionResult]:
        """Process all ``*.css`` assets concurrently.

        Waits for every stylesheet, then re-raises the first failure.
        Stylesheets that completed keep their changes.
        """
        names = [name for name in assets.names() if name.endswith(".css")]
        logger.debug("stylesheets: %s", names)
        if not names:
            return []

        sizes = assets.sizes()
        results = []
        with cf.ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self.compose_stylesheet, assets, name, sizes) for name in names]
            cf.wait(futures)
            for fut in futures:
                result = fut.result()
                if result is not None:
                    results.append(result)
        return results

    def compose_stylesheet(self, assets: AssetMap, name: str,
                           sizes: Optional[Mapping[str, int]] = None) -> Optional[CompositionResult]:
        """Sprite one stylesheet; ``None`` when it is left untouched."""
        if sizes is None:
            sizes = assets.sizes()

        sheet = Stylesheet.parse(assets.read_text(name))
        if next(sheet.style_rules(), None) is None:
            logger.debug("%s: no rules", name)
            return None

        refs = filter_references(extract_references(sheet), self.registry, sizes, self.options)
        batch = group_by_source(refs)
        if batch is None:
            logger.debug("%s: fewer than two images, skipped", name)
            return None
        logger.debug("%s image urls: %s", name, batch.sources)

        result = self.packer(batch.sources, self.options.algorithm, self.options.padding)
        sprite_name = interpolate_name(self.options.name, result.image)

        rewrite_references(sheet, batch.references, sprite_name, result)
        removed = self._emit(assets, name, sheet.serialize(), sprite_name, result, batch)
        return CompositionResult(name, sprite_name, list(batch.sources), len(batch.references), removed)

    @staticmethod
    def _emit(assets: AssetMap, name: str, text: str, sprite_name: str,
              result: PackResult, batch: SpriteBatch) -> List[str]:
        assets.insert(sprite_name, result.image)
        logger.debug("emit sprite file: %s", sprite_name)
        assets.replace(name, text)
        removed = batch.consumed_file_names()
        for file_name in removed:
            assets.delete(file_name)
        return removed
