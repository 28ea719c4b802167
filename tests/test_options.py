import pytest

from css_sprites import OptionsError, SpriteOptions


def test_defaults():
    options = SpriteOptions()
    assert options.name == "sprite.[contenthash:6].png"
    assert options.filter == "all"
    assert options.params == "__sprite"
    assert options.limit == 8192
    assert options.algorithm == "binary-tree"
    assert options.padding == 5


def test_from_mapping():
    options = SpriteOptions.from_mapping({"filter": "query", "padding": 0})
    assert options.filter == "query"
    assert options.padding == 0
    assert SpriteOptions.from_mapping(None) == SpriteOptions()


@pytest.mark.parametrize("overrides", [
    {"filter": "some"},
    {"algorithm": "spiral"},
    {"padding": -1},
    {"limit": "8k"},
    {"limit": True},
    {"name": ""},
    {"colour": "red"},
])
def test_rejects_bad_values(overrides):
    with pytest.raises(OptionsError):
        SpriteOptions.from_mapping(overrides)


def test_options_error_is_a_value_error():
    with pytest.raises(ValueError):
        SpriteOptions(padding=-5)
