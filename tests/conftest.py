import io

import pytest
from PIL import Image

from css_sprites import AssetMap, ImageDescriptor, ImageRegistry


def png_bytes(width, height, color=(255, 0, 0, 255)):
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_png(tmp_path):
    """Write a solid-colour PNG into tmp_path and return its path."""
    def _make(name, width, height, color=(255, 0, 0, 255)):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(png_bytes(width, height, color))
        return path
    return _make


@pytest.fixture
def registry():
    return ImageRegistry()


@pytest.fixture
def assets():
    return AssetMap()


@pytest.fixture
def register(registry, assets):
    """Register a fake ingested image of *size* bytes."""
    def _register(file_name, source_path=None, query="", size=100):
        source_path = source_path or f"/src/{file_name}"
        registry.register(file_name, ImageDescriptor(file_name, source_path, query, size))
        assets.insert(file_name, b"x" * size)
        return source_path
    return _register
