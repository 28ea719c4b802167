"""Pixel placements -> percentage ``background-position``/``background-size``.

With percentages the sub-image keeps its place when the element (and so
the scaled composite) is resized.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple

from .errors import ConsistencyError
from .packer import Placement

_FOUR_PLACES = Decimal("0.0001")


def _percent(value: float) -> str:
    # half away from zero, on the exact binary value
    return f"{Decimal(value).quantize(_FOUR_PLACES, rounding=ROUND_HALF_UP)}%"


def position_percent(offset: int, item_dim: int, total_dim: int) -> str:
    """Percentage that puts the image at *offset* under the element's origin."""
    if offset == 0:
        return "0%"
    if item_dim == total_dim:
        raise ConsistencyError(
            f"image spans the whole {total_dim}px canvas but sits at offset {offset}")
    return _percent(-offset / (item_dim - total_dim) * 100)


def size_percent(item_dim: int, total_dim: int) -> str:
    """How large the composite is relative to the image along one axis."""
    return _percent(total_dim / item_dim * 100)


def placement_values(placement: Placement, canvas_width: int, canvas_height: int) -> Tuple[str, str]:
    """``(background-position, background-size)`` values for one placement."""
    position = "%s %s" % (
        position_percent(placement.x, placement.width, canvas_width),
        position_percent(placement.y, placement.height, canvas_height),
    )
    size = "%s %s" % (
        size_percent(placement.width, canvas_width),
        size_percent(placement.height, canvas_height),
    )
    return position, size
