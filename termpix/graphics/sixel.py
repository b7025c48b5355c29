"""Contains a printer which draws images using sixel graphics."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PIL import Image

from termpix.data_structures import PrintOutcome
from termpix.enums import Protocol
from termpix.errors import EncodingError
from termpix.graphics.base import Printer
from termpix.io import passthrough

if TYPE_CHECKING:
    from PIL.Image import Image as PilImage
    from prompt_toolkit.output import Output

    from termpix.data_structures import Dimensions, PrintConfig

__all__ = ["SixelPrinter", "encode_sixel"]

log = logging.getLogger(__name__)

MAX_COLORS = 256
BAND_HEIGHT = 6


def _percent(value: int) -> int:
    return round(value * 100 / 255)


def _rle(values: list[int]) -> str:
    """Run-length encode a row of sixel values.

    Sixel uses ``!<count><char>`` to repeat a character.
    """
    parts = []
    i = 0
    while i < len(values):
        value = values[i]
        count = 1
        while i + count < len(values) and values[i + count] == value:
            count += 1
        char = chr(63 + value)
        parts.append(f"!{count}{char}" if count > 3 else char * count)
        i += count
    return "".join(parts)


def _palettize(
    image: PilImage,
) -> tuple[list[tuple[int, int, int]], list[int]]:
    """Reduce an image to at most :py:data:`MAX_COLORS` colours.

    Images which already use few enough colours keep their exact colours. Others are
    quantized using the median-cut algorithm.

    Args:
        image: The RGBA image to reduce

    Returns:
        The palette as a list of RGB tuples, and the palette index of each pixel in
        row-major order

    """
    rgb = image.convert("RGB")
    if (colors := rgb.getcolors(MAX_COLORS)) is not None:
        palette = [color for _count, color in colors]
        index = {bytes(color): i for i, color in enumerate(palette)}
        data = rgb.tobytes()
        indices = [index[data[i : i + 3]] for i in range(0, len(data), 3)]
        return palette, indices

    log.debug("Quantizing image to %d colors", MAX_COLORS)
    quantized = rgb.quantize(colors=MAX_COLORS, method=Image.Quantize.MEDIANCUT)
    flat = quantized.getpalette() or []
    palette = [
        (flat[i], flat[i + 1], flat[i + 2]) for i in range(0, len(flat) - 2, 3)
    ][:MAX_COLORS]
    return palette, list(quantized.tobytes())


def encode_sixel(image: PilImage) -> str:
    """Encode an image as a sixel escape sequence.

    Fully transparent pixels are not painted.

    Args:
        image: The RGBA image to encode

    Returns:
        The sixel data, wrapped in a device control string

    Raises:
        EncodingError: If the image's colours could not be reduced

    """
    width, height = image.size
    try:
        palette, indices = _palettize(image)
    except (OSError, ValueError) as error:
        raise EncodingError("Could not reduce the image's colors") from error
    alpha = image.getchannel("A").tobytes()

    parts = [
        # P1=0 (pixel aspect 2:1), P2=1 (unpainted pixels stay transparent)
        "\x1bP0;1;0q",
        # Raster attributes: 1:1 pixel aspect ratio, width and height
        f'"1;1;{width};{height}',
    ]
    parts.extend(
        f"#{i};2;{_percent(r)};{_percent(g)};{_percent(b)}"
        for i, (r, g, b) in enumerate(palette)
    )

    bands = []
    for top in range(0, height, BAND_HEIGHT):
        rows: dict[int, list[int]] = {}
        for bit, y in enumerate(range(top, min(top + BAND_HEIGHT, height))):
            offset = y * width
            for x in range(width):
                if not alpha[offset + x]:
                    continue
                color = indices[offset + x]
                if (values := rows.get(color)) is None:
                    values = rows[color] = [0] * width
                values[x] |= 1 << bit
        # Each colour is drawn over the band, returning to its start with "$"
        bands.append(
            "$".join(
                f"#{color}{_rle(values)}" for color, values in sorted(rows.items())
            )
        )
    parts.append("-".join(bands))

    parts.append("\x1b\\")
    return "".join(parts)


class SixelPrinter(Printer):
    """Print images using sixel graphics."""

    protocol = Protocol.SIXEL

    def draw(
        self,
        image: PilImage,
        size: Dimensions,
        config: PrintConfig,
        output: Output,
    ) -> PrintOutcome:
        """Write the image as sixel data."""
        output.write_raw(
            passthrough(encode_sixel(image), config.multiplexer_passthrough)
        )
        output.write_raw("\n")
        return PrintOutcome(width=size.cols, height=size.rows)
