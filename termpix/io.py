"""Define terminal input and output helpers."""

from __future__ import annotations

import io
import logging
import os
import sys
from functools import lru_cache
from typing import TYPE_CHECKING

from prompt_toolkit.data_structures import Size
from prompt_toolkit.output.vt100 import Vt100_Output

from termpix.filters import in_screen, in_tmux

if TYPE_CHECKING:
    from typing import IO, TextIO

log = logging.getLogger(__name__)

DEFAULT_TERMINAL_SIZE = Size(rows=24, columns=80)


@lru_cache
def _have_termios_tty_fcntl() -> bool:
    try:
        import fcntl  # noqa F401
        import termios  # noqa F401
        import tty  # noqa F401
    except ModuleNotFoundError:
        return False
    else:
        return True


def _fileno(stream: IO[str] | TextIO) -> int | None:
    """Return a stream's file descriptor, or :py:const:`None` if it has none."""
    try:
        return stream.fileno()
    except (AttributeError, io.UnsupportedOperation, ValueError):
        return None


def _tiocgwinsz(fd: int = 1) -> tuple[int, int, int, int]:
    """Get the size and pixel dimensions of the terminal with `termios`.

    Args:
        fd: The file descriptor of the terminal device

    Returns:
        A tuple of the terminal's rows, columns, pixel width and pixel height. Values
        which could not be determined are zero.

    """
    import array

    output = array.array("H", [0, 0, 0, 0])
    if _have_termios_tty_fcntl():
        import fcntl
        import termios

        try:
            fcntl.ioctl(fd, termios.TIOCGWINSZ, output)
        except OSError:
            pass
    rows, cols, xpixels, ypixels = output
    return rows, cols, xpixels, ypixels


def passthrough(cmd: str, enabled: bool = True) -> str:
    """Wrap an escape sequence for terminal multiplexer passthrough.

    Args:
        cmd: The escape sequence to wrap
        enabled: If :py:const:`False`, the command is returned unchanged

    Returns:
        The escape sequence, wrapped for the current multiplexer if there is one

    """
    if enabled:
        if in_tmux():
            cmd = cmd.replace("\x1b", "\x1b\x1b")
            cmd = f"\x1bPtmux;{cmd}\x1b\\"
        elif in_screen():
            # Screen limits escape sequences to 768 bytes, so we have to chunk it
            cmd = "".join(
                f"\x1bP{cmd[i : i + 764]}\x1b\\" for i in range(0, len(cmd), 764)
            )
    return cmd


def create_output(stdout: TextIO | None = None) -> Vt100_Output:
    """Create a prompt_toolkit output which writes to a stream.

    Unlike :py:meth:`Vt100_Output.from_pty`, this does not complain if the stream is
    not a terminal, so images can be written to files or pipes.

    Args:
        stdout: The stream to write to. Defaults to the standard output

    Returns:
        A VT100 output instance

    """
    if stdout is None:
        stdout = sys.stdout
    fd = _fileno(stdout)

    def get_size() -> Size:
        rows = cols = 0
        if fd is not None:
            rows, cols, _px, _py = _tiocgwinsz(fd)
        return Size(
            rows=rows or DEFAULT_TERMINAL_SIZE.rows,
            columns=cols or DEFAULT_TERMINAL_SIZE.columns,
        )

    return Vt100_Output(stdout, get_size, term=os.environ.get("TERM"))
