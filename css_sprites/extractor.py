"""Find background image references in a parsed stylesheet."""

import logging
import posixpath
import re
from dataclasses import dataclass
from typing import List, Optional

from .registry import ImageDescriptor
from .stylesheet import DeclarationHandle, Stylesheet

logger = logging.getLogger(__name__)

BACKGROUND_PROPERTIES = ("background", "background-image")
REMOTE_PREFIXES = ("//", "http://", "https://")

# url(path.ext[?query]) with optional quotes; the query is not part of the path
IMAGE_URL_RE = re.compile(
    r"url\(\s*['\"]?([^'\")]+?\.(?:png|jpe?g|gif))((?:[?#][^'\")]*)?)['\"]?\s*\)",
    re.IGNORECASE,
)


@dataclass
class ImageReference:
    url_path: str
    handle: DeclarationHandle
    image_file_name: str
    url_text: str   # the url(...) token exactly as written in the value
    descriptor: Optional[ImageDescriptor] = None


def is_remote(url_path: str) -> bool:
    return url_path.lower().startswith(REMOTE_PREFIXES)


def is_tiled(rule_text: str) -> bool:
    """Coarse check for repeating backgrounds: any ``repeat`` without ``no-repeat``."""
    return "repeat" in rule_text and "no-repeat" not in rule_text


def extract_references(sheet: Stylesheet) -> List[ImageReference]:
    """Return image references in document order, one per matching declaration.

    Only the first image URL of a declaration counts; other ``url()`` tokens
    in the same value (svg layers, fonts) are skipped over.
    """
    refs = []
    for rule_index, _rule in sheet.style_rules():
        rule_text = None
        for handle, decl in sheet.declarations(rule_index):
            if decl.property not in BACKGROUND_PROPERTIES:
                continue
            matched = IMAGE_URL_RE.search(decl.value)
            if not matched:
                continue
            url_path = matched.group(1).strip()
            if is_remote(url_path):
                logger.debug("skip remote image %s", url_path)
                continue
            if rule_text is None:
                rule_text = sheet.rule_text(rule_index)
            if is_tiled(rule_text):
                logger.debug("skip repeating background %s", url_path)
                continue
            logger.debug("css sprite reference: %s", url_path)
            refs.append(ImageReference(url_path, handle, posixpath.basename(url_path), matched.group(0)))
    return refs
