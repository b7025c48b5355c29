"""Define enums."""

from enum import Enum


class Protocol(str, Enum):
    """The terminal graphics protocols which can be used to print an image."""

    BLOCK = "block"
    KITTY = "kitty"
    ITERM = "iterm"
    SIXEL = "sixel"


class TransparencyMode(str, Enum):
    """Define how transparent pixels are handled by the block printer."""

    CHECKERBOARD = "checkerboard"
    PREMULTIPLIED = "premultiplied"
    TRANSPARENT = "transparent"
