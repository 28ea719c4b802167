import io
from itertools import combinations

import pytest
from PIL import Image

from css_sprites.errors import PackerError
from css_sprites.packer import ALGORITHMS, MaxRectsBin, pack

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def overlaps(a, b):
    return (a.x < b.x + b.width and a.x + a.width > b.x and
            a.y < b.y + b.height and a.y + a.height > b.y)


def test_binary_tree_packs_icons_side_by_side(make_png):
    a = str(make_png("icon-a.png", 40, 40, RED))
    b = str(make_png("icon-b.png", 20, 20, BLUE))
    result = pack([a, b], "binary-tree", 0)

    assert (result.canvas_width, result.canvas_height) == (60, 40)
    assert result.placements[a] == (0, 0, 40, 40)
    assert result.placements[b] == (40, 0, 20, 20)

    sprite = Image.open(io.BytesIO(result.image))
    assert sprite.format == "PNG"
    assert sprite.size == (60, 40)
    sprite = sprite.convert("RGBA")
    assert sprite.getpixel((10, 10)) == RED
    assert sprite.getpixel((45, 5)) == BLUE
    assert sprite.getpixel((45, 30))[3] == 0


def test_padding_separates_images_but_not_the_edges(make_png):
    a = str(make_png("a.png", 40, 40))
    b = str(make_png("b.png", 20, 20))
    result = pack([a, b], "binary-tree", 5)
    assert result.placements[b] == (45, 0, 20, 20)
    assert (result.canvas_width, result.canvas_height) == (65, 40)


def test_top_down(make_png):
    a = str(make_png("a.png", 10, 10))
    b = str(make_png("b.png", 20, 5))
    result = pack([a, b], "top-down", 5)
    assert result.placements[a] == (0, 0, 10, 10)
    assert result.placements[b] == (0, 15, 20, 5)
    assert (result.canvas_width, result.canvas_height) == (20, 20)


def test_left_right_and_diagonals(make_png):
    a = str(make_png("a.png", 10, 10))
    b = str(make_png("b.png", 20, 5))
    assert pack([a, b], "left-right").placements[b] == (10, 0, 20, 5)
    assert pack([a, b], "diagonal").placements[b] == (10, 10, 20, 5)
    alt = pack([a, b], "alt-diagonal")
    assert alt.placements[a] == (0, 5, 10, 10)
    assert alt.placements[b] == (10, 0, 20, 5)
    assert (alt.canvas_width, alt.canvas_height) == (30, 15)


@pytest.mark.parametrize("algorithm", sorted(ALGORITHMS))
def test_placements_never_overlap(make_png, algorithm):
    sizes = [(16, 16), (32, 8), (8, 32), (24, 24), (5, 7), (12, 30)]
    paths = [str(make_png(f"i{n}.png", w, h)) for n, (w, h) in enumerate(sizes)]
    result = pack(paths, algorithm, 2)

    assert set(result.placements) == set(paths)
    for p in result.placements.values():
        assert p.x >= 0 and p.y >= 0
        assert p.x + p.width <= result.canvas_width
        assert p.y + p.height <= result.canvas_height
    for p, q in combinations(result.placements.values(), 2):
        assert not overlaps(p, q)


def test_duplicate_sources_are_packed_once(make_png):
    a = str(make_png("a.png", 10, 10))
    b = str(make_png("b.png", 10, 10))
    result = pack([a, b, a], "left-right", 0)
    assert len(result.placements) == 2
    assert result.canvas_width == 20


def test_failures(tmp_path, make_png):
    a = str(make_png("a.png", 10, 10))
    with pytest.raises(PackerError):
        pack([])
    with pytest.raises(PackerError, match="unknown packing algorithm"):
        pack([a], "spiral")
    with pytest.raises(PackerError, match="cannot read"):
        pack([a, str(tmp_path / "missing.png")])
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"not an image")
    with pytest.raises(PackerError):
        pack([a, str(broken)])


def test_max_rects_bin_reports_full_bin():
    bin = MaxRectsBin(10, 10)
    assert bin.place(10, 5) == (0, 0)
    assert bin.place(10, 5) == (0, 5)
    assert bin.place(1, 1) is None
