"""
cli.py
------
Build a dist folder from a folder of stylesheets: every small background
image a stylesheet references is packed into one sprite per stylesheet,
and the stylesheet is rewritten to address the sprite.
"""

import argparse
import logging
import posixpath
import re
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .assets import AssetMap
from .composer import CompositionResult, SpriteComposer
from .errors import SpriteError
from .ingest import ImageIngestor
from .options import (
    DEFAULT_ALGORITHM,
    DEFAULT_FILTER,
    DEFAULT_LIMIT,
    DEFAULT_NAME,
    DEFAULT_PADDING,
    DEFAULT_PARAMS,
    FILTER_MODES,
    SpriteOptions,
)
from .packer import ALGORITHMS
from .registry import ImageRegistry

# --------------------------------------------------------------------- #
# Configuration
# --------------------------------------------------------------------- #
SRC_DIR = Path("./src")             # folder that contains the stylesheets
OUT_DIR = Path("./dist")            # folder for rewritten css, sprites and images
IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".gif"}
UNTOUCHED_PREFIXES = ("//", "http://", "https://", "data:")

CSS_URL_RE = re.compile(r"url\(\s*(['\"]?)([^'\")]+)\1\s*\)", re.IGNORECASE)


def _split_query(url: str) -> Tuple[str, str]:
    for i, ch in enumerate(url):
        if ch in "?#":
            return url[:i], url[i:]
    return url, ""


# --------------------------------------------------------------------- #
# Helper: stylesheets and the images they reference
# --------------------------------------------------------------------- #
def collect_stylesheets(src: Path) -> List[Path]:
    return sorted(p for p in src.rglob("*.css") if p.is_file())


def ingest_stylesheet(css_path: Path, css_name: str, src: Path, ingestor: ImageIngestor) -> str:
    """Ingest every local image *css_path* references.

    Returns the stylesheet text with those URLs pointing at the hashed
    output names. Remote, inline and missing images are left as written.
    """
    css_dir = posixpath.dirname(css_name) or "."

    def replace(match):
        path, query = _split_query(match.group(2).strip())
        if path.lower().startswith(UNTOUCHED_PREFIXES) or Path(path).suffix.lower() not in IMAGE_EXTS:
            return match.group(0)
        if path.startswith("/"):
            image = src / path.lstrip("/")
        else:
            image = css_path.parent / path
        if not image.is_file():
            return match.group(0)
        descriptor = ingestor.ingest(image.resolve(), query)
        return f"url({posixpath.relpath(descriptor.file_name, css_dir)})"

    return CSS_URL_RE.sub(replace, css_path.read_text(encoding="utf-8"))


def build(src: Path, out: Path, options: SpriteOptions) -> Tuple[List[CompositionResult], AssetMap]:
    registry = ImageRegistry()
    assets = AssetMap()
    ingestor = ImageIngestor(registry, assets)

    for css_path in collect_stylesheets(src):
        name = css_path.relative_to(src).as_posix()
        assets.insert(name, ingest_stylesheet(css_path, name, src, ingestor))

    results = SpriteComposer(registry, options).compose(assets)
    out.mkdir(parents=True, exist_ok=True)
    assets.write_to(out)
    return results, assets


# --------------------------------------------------------------------- #
# Main
# --------------------------------------------------------------------- #
def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Pack stylesheet background images into sprites")
    parser.add_argument("src", nargs="?", type=Path, default=SRC_DIR,
                        help="folder containing stylesheets")
    parser.add_argument("--out", type=Path, default=OUT_DIR,
                        help="output folder")
    parser.add_argument("--name", default=DEFAULT_NAME,
                        help="sprite file name template")
    parser.add_argument("--filter", choices=FILTER_MODES, default=DEFAULT_FILTER,
                        help="'query' only packs images whose url carries --params")
    parser.add_argument("--params", default=DEFAULT_PARAMS,
                        help="query tag used by --filter query")
    parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT,
                        help="only images smaller than this many bytes are packed")
    parser.add_argument("--algorithm", choices=sorted(ALGORITHMS), default=DEFAULT_ALGORITHM,
                        help="packing layout")
    parser.add_argument("--padding", type=int, default=DEFAULT_PADDING,
                        help="pixels between packed images")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log every decision")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if not args.src.is_dir():
        print(f"No such folder: {args.src}", file=sys.stderr)
        return 1

    try:
        options = SpriteOptions(name=args.name, filter=args.filter, params=args.params,
                                limit=args.limit, algorithm=args.algorithm, padding=args.padding)
        results, assets = build(args.src, args.out, options)
    except SpriteError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if not results:
        print(f"No sprites built from {args.src}")
    for r in results:
        print(f"{r.stylesheet}: {len(r.images)} images, {r.references} rules → {r.sprite_name}")
    print(f"Wrote {len(assets)} files to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
