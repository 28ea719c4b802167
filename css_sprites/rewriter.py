"""Point declarations at the composite image."""

import logging
import posixpath
from typing import Iterable

from .errors import ConsistencyError
from .extractor import ImageReference
from .layout import placement_values
from .packer import PackResult
from .stylesheet import Declaration, Stylesheet

logger = logging.getLogger(__name__)

SPRITE_PROPERTIES = ("background-position", "background-size")


def sprite_url(url_path: str, sprite_name: str) -> str:
    """Keep the directory part of the original URL in front of *sprite_name*."""
    directory = posixpath.dirname(url_path)
    return f"{directory}/{sprite_name}" if directory else sprite_name


def rewrite_reference(sheet: Stylesheet, ref: ImageReference, sprite_name: str, result: PackResult) -> None:
    source = ref.descriptor.source_path
    placement = result.placements.get(source)
    if placement is None:
        raise ConsistencyError(f"packer returned no placement for {source}")

    decl = sheet.declaration(ref.handle)
    new_url = f"url({sprite_url(ref.url_path, sprite_name)})"
    if ref.url_text in decl.value:
        # the first occurrence is the token the extractor matched
        decl.value = decl.value.replace(ref.url_text, new_url, 1)
    else:
        logger.debug("%s no longer in %r, url left as is", ref.url_text, decl.value)

    sheet.remove_properties(ref.handle.rule_index, SPRITE_PROPERTIES)
    position, size = placement_values(placement, result.canvas_width, result.canvas_height)
    new_decls = [
        Declaration("background-position", position),
        Declaration("background-size", size),
    ]
    sheet.insert_after(ref.handle, new_decls)
    logger.debug("new rules %s: %s", source, "; ".join(d.css_text() for d in new_decls))


def rewrite_references(sheet: Stylesheet, refs: Iterable[ImageReference],
                       sprite_name: str, result: PackResult) -> None:
    for ref in refs:
        rewrite_reference(sheet, ref, sprite_name, result)
