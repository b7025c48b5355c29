"""Test printing images with the kitty graphics protocol."""

from __future__ import annotations

import re
from base64 import b64decode
from io import BytesIO, StringIO
from pathlib import Path

import pytest
from PIL import Image
from prompt_toolkit.data_structures import Size
from prompt_toolkit.output.vt100 import Vt100_Output

from termpix.data_structures import Dimensions, PrintConfig, TerminalCapabilities
from termpix.enums import Protocol
from termpix.graphics.kitty import CHUNK_SIZE, KittyPrinter
from termpix.printer import print_image

KITTY_CMD = re.compile(r"\x1b_G(?P<params>[^;\x1b]*)(?:;(?P<payload>[^\x1b]*))?\x1b\\")


def make_output() -> tuple[Vt100_Output, StringIO]:
    """Create an output which writes to a string buffer."""
    stream = StringIO()
    return Vt100_Output(stream, lambda: Size(rows=24, columns=80)), stream


def parse_params(params: str) -> dict[str, str]:
    """Split a kitty command's control data into a dictionary."""
    return dict(param.split("=", 1) for param in params.split(","))


@pytest.fixture(autouse=True)
def no_multiplexer(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure escape sequences are not wrapped for a terminal multiplexer."""
    monkeypatch.delenv("TMUX", raising=False)
    monkeypatch.delenv("STY", raising=False)
    monkeypatch.setenv("TERM", "xterm-kitty")


def test_forced_kitty() -> None:
    """An image printed at a requested size occupies exactly that many cells."""
    output, stream = make_output()
    outcome = print_image(
        Image.new("RGB", (80, 50), (0, 128, 255)),
        PrintConfig(width=80, height=25, protocol=Protocol.KITTY),
        output=output,
        capabilities=TerminalCapabilities.unsupported(),
    )
    assert outcome == (80, 25)
    value = stream.getvalue()
    assert value.startswith("\x1b_G")
    params = parse_params(KITTY_CMD.match(value)["params"])
    assert params["a"] == "T"
    assert params["t"] == "d"
    assert params["f"] == "100"
    assert params["c"] == "80"
    assert params["r"] == "25"


def test_remote_transfer_chunks() -> None:
    """Image data is split into chunks, all but the last marked as continued."""
    output, stream = make_output()
    image = Image.effect_noise((128, 128), 100).convert("RGBA")
    KittyPrinter().print(
        image, Dimensions(10, 5, 100, 100), PrintConfig(), output
    )

    cmds = list(KITTY_CMD.finditer(stream.getvalue()))
    assert len(cmds) > 1
    payload = ""
    for i, cmd in enumerate(cmds):
        params = parse_params(cmd["params"])
        assert params["m"] == ("0" if i == len(cmds) - 1 else "1")
        if i:
            assert "a" not in params
        assert len(cmd["payload"]) <= CHUNK_SIZE
        payload += cmd["payload"]

    decoded = Image.open(BytesIO(b64decode(payload)))
    assert decoded.format == "PNG"
    assert decoded.size == (128, 128)


def test_local_transfer() -> None:
    """Local transfers reference a temporary file which the terminal deletes."""
    output, stream = make_output()
    image = Image.new("RGBA", (4, 4), (255, 0, 0, 255))
    KittyPrinter(local=True).print(
        image, Dimensions(2, 1, 20, 20), PrintConfig(), output
    )
    cmd = KITTY_CMD.match(stream.getvalue())
    assert cmd is not None
    params = parse_params(cmd["params"])
    assert params["t"] == "t"
    path = Path(b64decode(cmd["payload"]).decode())
    try:
        assert "tty-graphics-protocol" in path.name
        with Image.open(path) as decoded:
            assert decoded.size == (4, 4)
    finally:
        path.unlink()


@pytest.mark.parametrize(
    ("config", "expected"),
    [
        (PrintConfig(kitty_delete=True), "\x1b_Ga=d,d=c,q=2\x1b\\"),
        (
            PrintConfig(kitty_delete=True, absolute_offset=True, x=4, y=2),
            "\x1b_Ga=d,d=p,x=5,y=3,q=2\x1b\\",
        ),
    ],
)
def test_delete_before_printing(config: PrintConfig, expected: str) -> None:
    """Images at the target position can be deleted before printing."""
    output, stream = make_output()
    KittyPrinter().print(
        Image.new("RGBA", (2, 2)), Dimensions(1, 1, 2, 2), config, output
    )
    value = stream.getvalue()
    assert expected in value
    assert value.index(expected) < value.index("a=T")


def test_tmux_passthrough(monkeypatch: pytest.MonkeyPatch) -> None:
    """Commands are wrapped for tmux when passthrough is enabled."""
    monkeypatch.setenv("TMUX", "/tmp/tmux-1000/default,1,0")
    output, stream = make_output()
    KittyPrinter().print(
        Image.new("RGBA", (2, 2)),
        Dimensions(1, 1, 2, 2),
        PrintConfig(multiplexer_passthrough=True),
        output,
    )
    value = stream.getvalue()
    assert value.startswith("\x1bPtmux;\x1b\x1b_G")
    assert value.endswith("\x1b\x1b\\\x1b\\\n")
