"""Contains a printer which draws images using coloured half-block characters."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prompt_toolkit.output.color_depth import ColorDepth
from prompt_toolkit.styles.base import DEFAULT_ATTRS

from termpix.data_structures import PrintOutcome
from termpix.enums import Protocol, TransparencyMode
from termpix.graphics.base import Printer

if TYPE_CHECKING:
    from PIL.Image import Image as PilImage
    from prompt_toolkit.output import Output

    from termpix.data_structures import Dimensions, PrintConfig, TerminalCapabilities

__all__ = ["BlockPrinter"]

log = logging.getLogger(__name__)

UPPER_HALF_BLOCK = "▀"
LOWER_HALF_BLOCK = "▄"

CHECKERBOARD_DARK = (102, 102, 102)
CHECKERBOARD_LIGHT = (153, 153, 153)


def _hex(color: tuple[int, int, int]) -> str:
    r, g, b = color
    return f"{r:02x}{g:02x}{b:02x}"


def checkerboard_color(row: int, col: int) -> tuple[int, int, int]:
    """Return the colour of the transparency checkerboard at a pixel.

    Args:
        row: The pixel row
        col: The pixel column

    Returns:
        The checkerboard colour as an RGB tuple

    """
    return CHECKERBOARD_DARK if row % 2 == col % 2 else CHECKERBOARD_LIGHT


def composite(
    pixel: tuple[int, int, int, int], background: tuple[int, int, int]
) -> tuple[int, int, int]:
    """Alpha-composite a pixel over a background colour."""
    r, g, b, a = pixel
    if a == 255:
        return r, g, b
    br, bg, bb = background
    return (
        (r * a + br * (255 - a)) // 255,
        (g * a + bg * (255 - a)) // 255,
        (b * a + bb * (255 - a)) // 255,
    )


class BlockPrinter(Printer):
    """Print images using half-block characters.

    Each terminal cell displays two vertically stacked pixels: the upper pixel is the
    foreground colour of an upper half-block glyph, and the lower pixel is the
    background colour.
    """

    protocol = Protocol.BLOCK

    def cell_size(self, capabilities: TerminalCapabilities) -> tuple[int, int]:
        """Each cell displays one column of two pixels."""
        return 1, 2

    def _colors(
        self,
        image: PilImage,
        transparency: TransparencyMode,
    ) -> tuple[list[tuple[int, int, int] | None], int, int]:
        """Calculate the display colour of every pixel in an image.

        Args:
            image: The RGBA image
            transparency: How transparent pixels are handled

        Returns:
            A flat list of colours in row-major order, with :py:const:`None` for
            pixels which should not be drawn, and the image's width and height

        """
        width, height = image.size
        if transparency == TransparencyMode.PREMULTIPLIED:
            data = image.convert("RGBa").tobytes()
        else:
            data = image.tobytes()

        colors: list[tuple[int, int, int] | None] = []
        for i in range(width * height):
            r, g, b, a = data[i * 4 : i * 4 + 4]
            if transparency == TransparencyMode.PREMULTIPLIED:
                colors.append((r, g, b))
            elif transparency == TransparencyMode.TRANSPARENT:
                colors.append(None if a == 0 else (r, g, b))
            else:
                y, x = divmod(i, width)
                colors.append(composite((r, g, b, a), checkerboard_color(y, x)))
        return colors, width, height

    def draw(
        self,
        image: PilImage,
        size: Dimensions,
        config: PrintConfig,
        output: Output,
    ) -> PrintOutcome:
        """Write each pair of pixel rows as a line of coloured half-blocks."""
        color_depth = (
            ColorDepth.DEPTH_24_BIT if config.truecolor else ColorDepth.DEPTH_8_BIT
        )
        colors, width, height = self._colors(image, config.transparency)

        for y in range(0, height, 2):
            if y:
                output.cursor_forward(config.x)
            for x in range(width):
                upper = colors[y * width + x]
                lower = colors[(y + 1) * width + x] if y + 1 < height else None
                if upper is None and lower is None:
                    # Leave the cell untouched
                    output.reset_attributes()
                    output.cursor_forward(1)
                    continue
                if upper is not None:
                    attrs = DEFAULT_ATTRS._replace(
                        color=_hex(upper),
                        bgcolor="" if lower is None else _hex(lower),
                    )
                    char = UPPER_HALF_BLOCK
                else:
                    assert lower is not None
                    attrs = DEFAULT_ATTRS._replace(color=_hex(lower))
                    char = LOWER_HALF_BLOCK
                output.set_attributes(attrs, color_depth)
                output.write_raw(char)
            output.reset_attributes()
            output.write_raw("\r\n")

        return PrintOutcome(width=width, height=(height + 1) // 2)
