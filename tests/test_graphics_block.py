"""Test printing images with half-block characters."""

from __future__ import annotations

import re
from io import StringIO

import pytest
from PIL import Image
from prompt_toolkit.data_structures import Size
from prompt_toolkit.output.vt100 import Vt100_Output

from termpix.data_structures import Dimensions, PrintConfig, TerminalCapabilities
from termpix.enums import TransparencyMode
from termpix.errors import InvalidConfiguration
from termpix.graphics.block import (
    CHECKERBOARD_DARK,
    CHECKERBOARD_LIGHT,
    BlockPrinter,
    checkerboard_color,
    composite,
)
from termpix.printer import print_image

TRUECOLOR_CELL = re.compile(
    r"\x1b\[0;38;2;(\d+);(\d+);(\d+);48;2;(\d+);(\d+);(\d+)m▀"
)


def make_output() -> tuple[Vt100_Output, StringIO]:
    """Create an output which writes to a string buffer."""
    stream = StringIO()
    return Vt100_Output(stream, lambda: Size(rows=24, columns=80)), stream


def test_opaque_red_image() -> None:
    """A 20x10 red image is printed as 5 rows of 20 red half-blocks."""
    output, stream = make_output()
    image = Image.new("RGB", (20, 10), (255, 0, 0))

    outcome = print_image(
        image,
        PrintConfig(),
        output=output,
        capabilities=TerminalCapabilities.unsupported(),
    )

    assert outcome == (20, 5)
    lines = stream.getvalue().split("\r\n")
    assert lines[-1] == ""
    rows = lines[:-1]
    assert len(rows) == 5
    for row in rows:
        cells = TRUECOLOR_CELL.findall(row)
        assert len(cells) == 20
        assert all(cell == ("255", "0", "0") * 2 for cell in cells)
        assert row.endswith("\x1b[0m")


def test_256_colors() -> None:
    """Colors are reduced to the 256 color palette if truecolor is disabled."""
    output, stream = make_output()
    image = Image.new("RGBA", (1, 2), (255, 0, 0, 255))
    BlockPrinter().print(
        image, Dimensions(1, 1, 1, 2), PrintConfig(truecolor=False), output
    )
    assert stream.getvalue() == "\x1b[0;38;5;196;48;5;196m▀\x1b[0m\r\n"


def test_odd_height() -> None:
    """The bottom half of the last row is left empty for odd image heights."""
    output, stream = make_output()
    image = Image.new("RGBA", (1, 3), (0, 255, 0, 255))
    outcome = BlockPrinter().print(
        image, Dimensions(1, 2, 1, 4), PrintConfig(), output
    )
    assert outcome == (1, 2)
    assert stream.getvalue().split("\r\n")[1] == "\x1b[0;38;2;0;255;0m▀\x1b[0m"


def test_checkerboard_transparency() -> None:
    """Transparent pixels are drawn over a checkerboard alternating per pixel."""
    output, stream = make_output()
    image = Image.new("RGBA", (2, 2), (0, 0, 0, 0))
    BlockPrinter().print(image, Dimensions(2, 1, 2, 2), PrintConfig(), output)
    first, second = TRUECOLOR_CELL.findall(stream.getvalue())
    # The upper and lower halves of each cell get different tones
    assert first == tuple(str(v) for v in CHECKERBOARD_DARK + CHECKERBOARD_LIGHT)
    assert second == tuple(str(v) for v in CHECKERBOARD_LIGHT + CHECKERBOARD_DARK)


def test_transparent_mode() -> None:
    """Fully transparent cells are skipped in transparent mode."""
    output, stream = make_output()
    image = Image.new("RGBA", (2, 2), (255, 255, 255, 0))
    config = PrintConfig(transparency=TransparencyMode.TRANSPARENT)
    BlockPrinter().print(image, Dimensions(2, 1, 2, 2), config, output)
    assert stream.getvalue() == "\x1b[0m\x1b[C\x1b[0m\x1b[C\x1b[0m\r\n"


def test_transparent_mode_lower_pixel_only() -> None:
    """A lower half-block is drawn if only the lower pixel is visible."""
    output, stream = make_output()
    image = Image.new("RGBA", (1, 2), (0, 0, 0, 0))
    image.putpixel((0, 1), (0, 0, 255, 255))
    config = PrintConfig(transparency=TransparencyMode.TRANSPARENT)
    BlockPrinter().print(image, Dimensions(1, 1, 1, 2), config, output)
    assert stream.getvalue() == "\x1b[0;38;2;0;0;255m▄\x1b[0m\r\n"


def test_premultiplied_mode() -> None:
    """Colors are multiplied by their alpha in premultiplied mode."""
    output, stream = make_output()
    image = Image.new("RGBA", (1, 2), (255, 255, 255, 0))
    config = PrintConfig(transparency=TransparencyMode.PREMULTIPLIED)
    BlockPrinter().print(image, Dimensions(1, 1, 1, 2), config, output)
    assert TRUECOLOR_CELL.findall(stream.getvalue()) == [("0",) * 6]


def test_relative_offset() -> None:
    """Each row of the image is indented by the column offset."""
    output, stream = make_output()
    image = Image.new("RGBA", (1, 4), (255, 0, 0, 255))
    BlockPrinter().print(
        image, Dimensions(1, 2, 1, 4), PrintConfig(x=3, y=2), output
    )
    rows = stream.getvalue().split("\r\n")
    assert rows[0].startswith("\n\n\x1b[3C\x1b[0;38;2")
    assert rows[1].startswith("\x1b[3C\x1b[0;38;2")


def test_negative_relative_offset() -> None:
    """Negative row offsets move the cursor up."""
    output, stream = make_output()
    image = Image.new("RGBA", (1, 2), (255, 0, 0, 255))
    BlockPrinter().print(image, Dimensions(1, 1, 1, 2), PrintConfig(y=-2), output)
    assert stream.getvalue().startswith("\x1b[2F\x1b[0;38;2")


def test_absolute_offset() -> None:
    """Absolute offsets move the cursor from the top left of the terminal."""
    output, stream = make_output()
    image = Image.new("RGBA", (1, 2), (255, 0, 0, 255))
    config = PrintConfig(x=2, y=1, absolute_offset=True)
    BlockPrinter().print(image, Dimensions(1, 1, 1, 2), config, output)
    assert stream.getvalue().startswith("\x1b[2;3H")


@pytest.mark.parametrize(
    "config",
    [
        PrintConfig(x=-1),
        PrintConfig(y=-1, absolute_offset=True),
    ],
)
def test_invalid_offsets(config: PrintConfig) -> None:
    """Offsets which cannot be reached are rejected."""
    output, stream = make_output()
    image = Image.new("RGBA", (1, 2))
    with pytest.raises(InvalidConfiguration):
        BlockPrinter().print(image, Dimensions(1, 1, 1, 2), config, output)
    assert stream.getvalue() == ""


def test_restore_cursor() -> None:
    """The cursor position is saved and restored around the image."""
    output, stream = make_output()
    image = Image.new("RGB", (2, 2), (255, 0, 0))
    print_image(
        image,
        PrintConfig(restore_cursor=True),
        output=output,
        capabilities=TerminalCapabilities.unsupported(),
    )
    value = stream.getvalue()
    assert value.startswith("\x1b[s")
    assert value.endswith("\x1b[u")


def test_checkerboard_color() -> None:
    """Checkerboard squares alternate along rows and columns."""
    assert checkerboard_color(0, 0) == CHECKERBOARD_DARK
    assert checkerboard_color(0, 1) == CHECKERBOARD_LIGHT
    assert checkerboard_color(1, 0) == CHECKERBOARD_LIGHT
    assert checkerboard_color(1, 1) == CHECKERBOARD_DARK


def test_composite() -> None:
    """Pixels are blended with the background according to their alpha."""
    assert composite((10, 20, 30, 255), (0, 0, 0)) == (10, 20, 30)
    assert composite((10, 20, 30, 0), (100, 100, 100)) == (100, 100, 100)
    assert composite((255, 255, 255, 51), (0, 0, 0)) == (51, 51, 51)
