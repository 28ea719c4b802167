"""Exceptions raised while composing sprites."""


class SpriteError(Exception):
    """Base class for every error raised by css_sprites."""


class OptionsError(SpriteError, ValueError):
    """An option value is outside its allowed range."""


class StylesheetParseError(SpriteError):
    """The stylesheet text could not be parsed."""


class PackerError(SpriteError):
    """The packer could not lay out or render the requested images."""


class ConsistencyError(SpriteError):
    """Packer output does not cover a reference that was sent to it."""
