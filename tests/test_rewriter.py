import pytest

from css_sprites.errors import ConsistencyError
from css_sprites.extractor import extract_references
from css_sprites.packer import PackResult, Placement
from css_sprites.registry import ImageDescriptor
from css_sprites.rewriter import rewrite_references, sprite_url
from css_sprites.stylesheet import Stylesheet

LAYOUT = PackResult(b"", 60, 40, {
    "/src/a.png": Placement(0, 0, 40, 40),
    "/src/b.png": Placement(40, 0, 20, 20),
})


def prepared(css):
    sheet = Stylesheet.parse(css)
    refs = extract_references(sheet)
    for ref in refs:
        name = ref.image_file_name
        ref.descriptor = ImageDescriptor(name, f"/src/{name}")
    return sheet, refs


def properties(sheet, rule_index):
    return [(d.property, d.value) for _, d in sheet.declarations(rule_index)]


def test_sprite_url_keeps_directory():
    assert sprite_url("../img/a.png", "sprite.abc.png") == "../img/sprite.abc.png"
    assert sprite_url("a.png", "sprite.abc.png") == "sprite.abc.png"


def test_rewrites_url_and_appends_position_and_size():
    sheet, refs = prepared(
        ".a { background: url(img/a.png) no-repeat; width: 40px; }"
        ".b { background-position: 5px 5px; background-image: url(b.png); background-size: 1px; }")
    rewrite_references(sheet, refs, "sprite.abc.png", LAYOUT)
    (first, _), (second, _) = list(sheet.style_rules())

    assert properties(sheet, first) == [
        ("background", "url(img/sprite.abc.png) no-repeat"),
        ("background-position", "0% 0%"),
        ("background-size", "150.0000% 100.0000%"),
        ("width", "40px"),
    ]
    assert properties(sheet, second) == [
        ("background-image", "url(sprite.abc.png)"),
        ("background-position", "100.0000% 0%"),
        ("background-size", "300.0000% 200.0000%"),
    ]


def test_rewriting_twice_leaves_one_position_and_size():
    sheet, refs = prepared(".a { background: url(a.png); } .b { background: url(b.png); }")
    rewrite_references(sheet, refs, "sprite.abc.png", LAYOUT)
    rewrite_references(sheet, refs, "sprite.abc.png", LAYOUT)

    reparsed = Stylesheet.parse(sheet.serialize())
    assert [r.url_path for r in extract_references(reparsed)] == ["sprite.abc.png"] * 2
    for index, _ in reparsed.style_rules():
        names = [d.property for _, d in reparsed.declarations(index)]
        assert names.count("background-position") == 1
        assert names.count("background-size") == 1


def test_missing_placement_is_fatal():
    sheet, refs = prepared(".a { background: url(a.png); } .c { background: url(c.png); }")
    with pytest.raises(ConsistencyError, match="/src/c.png"):
        rewrite_references(sheet, refs, "sprite.abc.png", LAYOUT)


def test_only_the_image_layer_is_replaced():
    sheet, refs = prepared(".a { background: url(shadow.svg), url(img/a.png) no-repeat; }")
    rewrite_references(sheet, refs, "sprite.abc.png", LAYOUT)
    index, _ = next(sheet.style_rules())
    assert properties(sheet, index)[0] == (
        "background", "url(shadow.svg), url(img/sprite.abc.png) no-repeat")


def test_svg_layer_after_the_image_is_kept():
    sheet, refs = prepared(".b { background-image: url(b.png), url(b.svg); }")
    rewrite_references(sheet, refs, "sprite.abc.png", LAYOUT)
    index, _ = next(sheet.style_rules())
    assert properties(sheet, index)[0] == ("background-image", "url(sprite.abc.png), url(b.svg)")


def test_other_url_properties_are_untouched():
    sheet, refs = prepared(
        ".a { cursor: url(a.png), pointer; mask: url(m.svg); background: url('a.png') no-repeat; }")
    rewrite_references(sheet, refs, "sprite.abc.png", LAYOUT)
    index, _ = next(sheet.style_rules())
    assert properties(sheet, index) == [
        ("cursor", "url(a.png), pointer"),
        ("mask", "url(m.svg)"),
        ("background", "url(sprite.abc.png) no-repeat"),
        ("background-position", "0% 0%"),
        ("background-size", "150.0000% 100.0000%"),
    ]
