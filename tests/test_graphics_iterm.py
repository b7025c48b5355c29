"""Test printing images with the iTerm inline images protocol."""

from __future__ import annotations

import re
from base64 import b64decode
from io import BytesIO, StringIO

import pytest
from PIL import Image
from prompt_toolkit.data_structures import Size
from prompt_toolkit.output.vt100 import Vt100_Output

from termpix.data_structures import PrintConfig, TerminalCapabilities
from termpix.printer import print_image

ITERM_CMD = re.compile(
    r"\x1b\]1337;File=inline=1;preserveAspectRatio=1"
    r";size=(?P<size>\d+);width=(?P<width>\d+);height=(?P<height>\d+)"
    r":(?P<data>[A-Za-z0-9+/=]+)\x07\n"
)


@pytest.fixture(autouse=True)
def no_multiplexer(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure escape sequences are not wrapped for a terminal multiplexer."""
    monkeypatch.delenv("TMUX", raising=False)
    monkeypatch.delenv("STY", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")


def test_iterm_inline_image() -> None:
    """Images are sent as base64 encoded PNG data sized in cells."""
    stream = StringIO()
    output = Vt100_Output(stream, lambda: Size(rows=24, columns=80))
    image = Image.new("RGBA", (30, 40), (10, 20, 30, 255))

    outcome = print_image(
        image,
        PrintConfig(width=6),
        output=output,
        capabilities=TerminalCapabilities(iterm=True, cell_size_px=(10, 20)),
    )

    assert outcome == (6, 4)
    match = ITERM_CMD.fullmatch(stream.getvalue())
    assert match is not None
    assert match["width"] == "6"
    assert match["height"] == "4"
    data = b64decode(match["data"])
    assert int(match["size"]) == len(data)
    decoded = Image.open(BytesIO(data))
    assert decoded.format == "PNG"
    # The terminal scales the image, so it is sent at its original size
    assert decoded.size == (30, 40)
