"""Options recognised by the sprite composer."""

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from .errors import OptionsError
from .packer import ALGORITHMS

# --------------------------------------------------------------------- #
# Defaults
# --------------------------------------------------------------------- #
DEFAULT_NAME = "sprite.[contenthash:6].png"   # output name of each composite
DEFAULT_FILTER = "all"                        # "all" or "query"
DEFAULT_PARAMS = "__sprite"                   # query tag required by filter="query"
DEFAULT_LIMIT = 8 * 1024                      # only images smaller than this are packed
DEFAULT_ALGORITHM = "binary-tree"
DEFAULT_PADDING = 5                           # pixels between packed images

FILTER_MODES = ("all", "query")


@dataclass(frozen=True)
class SpriteOptions:
    name: str = DEFAULT_NAME
    filter: str = DEFAULT_FILTER
    params: str = DEFAULT_PARAMS
    limit: int = DEFAULT_LIMIT
    algorithm: str = DEFAULT_ALGORITHM
    padding: int = DEFAULT_PADDING

    def __post_init__(self):
        if not self.name:
            raise OptionsError("name must be a non-empty template")
        if self.filter not in FILTER_MODES:
            raise OptionsError(f"filter must be one of {FILTER_MODES}, got {self.filter!r}")
        if self.algorithm not in ALGORITHMS:
            raise OptionsError(
                f"unknown algorithm {self.algorithm!r} (choose from {', '.join(sorted(ALGORITHMS))})")
        for key in ("limit", "padding"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise OptionsError(f"{key} must be a non-negative integer, got {value!r}")

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]] = None) -> "SpriteOptions":
        """Build options from a plain dict of overrides; unknown keys are rejected."""
        mapping = dict(mapping or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise OptionsError(f"unknown option(s): {', '.join(unknown)}")
        return cls(**mapping)
