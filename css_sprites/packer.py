"""
packer.py
---------
Pack a list of images into one RGBA sprite sheet and report where each
image landed.

Layouts: top-down, left-right, diagonal, alt-diagonal, binary-tree
(growing packer, the default) and max-rects.
"""

import io
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from PIL import Image

from .errors import PackerError

logger = logging.getLogger(__name__)


class Placement(NamedTuple):
    x: int
    y: int
    width: int
    height: int


@dataclass
class PackResult:
    image: bytes
    canvas_width: int
    canvas_height: int
    placements: Dict[str, Placement] = field(default_factory=dict)


# an item is (key, width, height) with padding already added
Item = Tuple[str, int, int]
Positions = Dict[str, Tuple[int, int]]


# --------------------------------------------------------------------- #
# Helper: load every source (path -> RGBA image)
# --------------------------------------------------------------------- #
def load_images(sources: Sequence[str]) -> Dict[str, Image.Image]:
    imgs = {}
    for src in sources:
        if src in imgs:
            continue
        try:
            with Image.open(src) as im:
                imgs[src] = im.convert("RGBA")
        except OSError as exc:
            raise PackerError(f"cannot read image {src}: {exc}") from exc
    return imgs


# --------------------------------------------------------------------- #
# -----  Linear layouts  ----------------------------------------------
# --------------------------------------------------------------------- #
def layout_top_down(items: List[Item]) -> Positions:
    positions, y = {}, 0
    for key, w, h in items:
        positions[key] = (0, y)
        y += h
    return positions


def layout_left_right(items: List[Item]) -> Positions:
    positions, x = {}, 0
    for key, w, h in items:
        positions[key] = (x, 0)
        x += w
    return positions


def layout_diagonal(items: List[Item]) -> Positions:
    positions, x, y = {}, 0, 0
    for key, w, h in items:
        positions[key] = (x, y)
        x += w
        y += h
    return positions


def layout_alt_diagonal(items: List[Item]) -> Positions:
    """Diagonal from the bottom-left corner up to the top-right one."""
    total_h = sum(h for _, _, h in items)
    positions, x, y = {}, 0, total_h
    for key, w, h in items:
        y -= h
        positions[key] = (x, y)
        x += w
    return positions


# --------------------------------------------------------------------- #
# -----  Growing binary-tree packing  ---------------------------------
# --------------------------------------------------------------------- #
class _Node:
    __slots__ = ("x", "y", "w", "h", "used", "right", "down")

    def __init__(self, x: int, y: int, w: int, h: int):
        self.x, self.y, self.w, self.h = x, y, w, h
        self.used = False
        self.right: Optional["_Node"] = None
        self.down: Optional["_Node"] = None


class GrowingPacker:
    """Binary-tree packer whose root grows right or down as blocks arrive.

    The root starts at the size of the first block, so feed blocks
    largest first.
    """

    def __init__(self):
        self.root: Optional[_Node] = None

    def fit(self, w: int, h: int) -> Tuple[int, int]:
        if self.root is None:
            self.root = _Node(0, 0, w, h)
        node = self._find(self.root, w, h)
        if node is not None:
            node = self._split(node, w, h)
        else:
            node = self._grow(w, h)
        return node.x, node.y

    def _find(self, node, w, h):
        if node.used:
            return self._find(node.right, w, h) or self._find(node.down, w, h)
        if w <= node.w and h <= node.h:
            return node
        return None

    @staticmethod
    def _split(node, w, h):
        node.used = True
        node.down = _Node(node.x, node.y + h, node.w, node.h - h)
        node.right = _Node(node.x + w, node.y, node.w - w, h)
        return node

    def _grow(self, w, h):
        root = self.root
        can_grow_down = w <= root.w
        can_grow_right = h <= root.h

        # keep the canvas roughly square
        should_grow_right = can_grow_right and root.h >= root.w + w
        should_grow_down = can_grow_down and root.w >= root.h + h

        if should_grow_right:
            return self._grow_right(w, h)
        if should_grow_down:
            return self._grow_down(w, h)
        if can_grow_right:
            return self._grow_right(w, h)
        if can_grow_down:
            return self._grow_down(w, h)
        # unreachable when blocks arrive largest first
        raise PackerError(f"binary-tree packer cannot place a {w}×{h} block")

    def _grow_right(self, w, h):
        old = self.root
        root = _Node(0, 0, old.w + w, old.h)
        root.used = True
        root.down = old
        root.right = _Node(old.w, 0, w, old.h)
        self.root = root
        return self._split(self._find(root, w, h), w, h)

    def _grow_down(self, w, h):
        old = self.root
        root = _Node(0, 0, old.w, old.h + h)
        root.used = True
        root.down = _Node(0, old.h, old.w, h)
        root.right = old
        self.root = root
        return self._split(self._find(root, w, h), w, h)


def layout_binary_tree(items: List[Item]) -> Positions:
    # biggest side first so the root starts large
    ordered = sorted(items, key=lambda t: max(t[1], t[2]), reverse=True)
    packer = GrowingPacker()
    return {key: packer.fit(w, h) for key, w, h in ordered}


# --------------------------------------------------------------------- #
# -----  MaxRects (best area fit) -------------------------------------
# --------------------------------------------------------------------- #
class Rect(NamedTuple):
    x: int
    y: int
    w: int
    h: int

    def intersects(self, other: "Rect") -> bool:
        return (self.x < other.x + other.w and other.x < self.x + self.w and
                self.y < other.y + other.h and other.y < self.y + self.h)

    def contains(self, other: "Rect") -> bool:
        return (self.x <= other.x and self.y <= other.y and
                other.x + other.w <= self.x + self.w and
                other.y + other.h <= self.y + self.h)

    def minus(self, used: "Rect") -> List["Rect"]:
        """Maximal pieces of this rect left uncovered by *used*."""
        pieces = []
        if used.x > self.x:
            pieces.append(Rect(self.x, self.y, used.x - self.x, self.h))
        if used.x + used.w < self.x + self.w:
            right = used.x + used.w
            pieces.append(Rect(right, self.y, self.x + self.w - right, self.h))
        if used.y > self.y:
            pieces.append(Rect(self.x, self.y, self.w, used.y - self.y))
        if used.y + used.h < self.y + self.h:
            bottom = used.y + used.h
            pieces.append(Rect(self.x, bottom, self.w, self.y + self.h - bottom))
        return pieces


class MaxRectsBin:
    """Fixed-size bin tracking the maximal free rectangles, which may overlap."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.free: List[Rect] = [Rect(0, 0, width, height)]

    def place(self, w: int, h: int) -> Optional[Tuple[int, int]]:
        """Top-left corner for a *w*×*h* block, or ``None`` when it cannot fit."""
        candidates = [r for r in self.free if w <= r.w and h <= r.h]
        if not candidates:
            return None
        # least leftover area, then top-most, then left-most
        target = min(candidates, key=lambda r: (r.w * r.h - w * h, r.y, r.x))
        used = Rect(target.x, target.y, w, h)

        free = []
        for r in self.free:
            free.extend(r.minus(used) if r.intersects(used) else [r])
        self.free = self._maximal(free)
        return used.x, used.y

    @staticmethod
    def _maximal(rects: List[Rect]) -> List[Rect]:
        kept: List[Rect] = []
        for i, r in enumerate(rects):
            if r in kept:
                continue
            if any(j != i and other != r and other.contains(r) for j, other in enumerate(rects)):
                continue
            kept.append(r)
        return kept


def layout_max_rects(items: List[Item]) -> Positions:
    """Pack into a square-ish bin, doubling its shorter side until all items fit."""
    side = math.isqrt(sum(w * h for _, w, h in items)) + 1
    width = max([side] + [w for _, w, _ in items])
    height = max([side] + [h for _, _, h in items])
    ordered = sorted(items, key=lambda t: max(t[1], t[2]), reverse=True)

    while True:
        bin_ = MaxRectsBin(width, height)
        positions = {}
        for key, w, h in ordered:
            corner = bin_.place(w, h)
            if corner is None:
                break
            positions[key] = corner
        else:
            return positions

        if width <= height:
            width *= 2
        else:
            height *= 2


ALGORITHMS: Dict[str, Callable[[List[Item]], Positions]] = {
    "top-down": layout_top_down,
    "left-right": layout_left_right,
    "diagonal": layout_diagonal,
    "alt-diagonal": layout_alt_diagonal,
    "binary-tree": layout_binary_tree,
    "max-rects": layout_max_rects,
}


# --------------------------------------------------------------------- #
# Create a sprite from the packed layout
# --------------------------------------------------------------------- #
def make_sprite(imgs: Dict[str, Image.Image], placements: Dict[str, Placement],
                sprite_w: int, sprite_h: int, bg=(0, 0, 0, 0)) -> Image.Image:
    sprite = Image.new("RGBA", (sprite_w, sprite_h), bg)
    for key, p in placements.items():
        im = imgs[key]
        sprite.paste(im, (p.x, p.y), im)
    return sprite


def encode_png(sprite: Image.Image) -> bytes:
    out = io.BytesIO()
    sprite.save(out, format="PNG", optimize=True)
    return out.getvalue()


# --------------------------------------------------------------------- #
# Entry point used by the composer
# --------------------------------------------------------------------- #
def pack(sources: Sequence[str], algorithm: str = "binary-tree", padding: int = 0) -> PackResult:
    """Lay out *sources* with *algorithm* and render the composite.

    *padding* pixels are reserved to the right of and below every image,
    except along the far canvas edges. Placements are keyed by source path
    and report each image's own size.
    """
    if not sources:
        raise PackerError("no images to pack")
    layout = ALGORITHMS.get(algorithm)
    if layout is None:
        raise PackerError(f"unknown packing algorithm {algorithm!r}")

    imgs = load_images(sources)
    items = [(key, im.width + padding, im.height + padding) for key, im in imgs.items()]
    positions = layout(items)

    placements = {}
    for key, im in imgs.items():
        x, y = positions[key]
        placements[key] = Placement(x, y, im.width, im.height)

    sprite_w = max(p.x + p.width + padding for p in placements.values()) - padding
    sprite_h = max(p.y + p.height + padding for p in placements.values()) - padding

    sprite = make_sprite(imgs, placements, sprite_w, sprite_h)
    data = encode_png(sprite)
    logger.debug("packed %d images into %d×%d (%s, padding %d, %d bytes)",
                 len(placements), sprite_w, sprite_h, algorithm, padding, len(data))
    return PackResult(data, sprite_w, sprite_h, placements)
