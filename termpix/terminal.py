"""Contain classes related to querying terminal features."""

from __future__ import annotations

import logging
import os
import re
import select
import sys
import tempfile
import time
from base64 import b64encode
from contextlib import ExitStack, contextmanager, suppress
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

from termpix.data_structures import TerminalCapabilities
from termpix.errors import NotATerminal
from termpix.io import _fileno, _have_termios_tty_fcntl, _tiocgwinsz, passthrough

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import IO, Any, TextIO

log = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT = 0.2

# Marker which kitty requires in the names of temporary files it is allowed to read
KITTY_TEMP_FILE_MARKER = "tty-graphics-protocol"

ITERM_TERM_PROGRAMS = ("iTerm", "WezTerm", "mintty", "rio", "WarpTerminal")
ITERM_LC_TERMINALS = ("iTerm", "WezTerm", "mintty", "rio")
KITTY_TERM_PROGRAMS = ("WezTerm", "ghostty")
SIXEL_TERMS = {"mlterm", "yaft-256color", "foot", "foot-extra", "eat-truecolor"}

DA_RESPONSE_PATTERN = re.compile(r"\x1b\[\?(?P<params>[\d;]*)c")


class TerminalSession:
    """Own the controlling terminal's input mode for the duration of queries.

    Raw mode is acquired by the outermost :py:meth:`raw` scope and released when it
    exits, so nested or repeated queries cannot corrupt the terminal's mode.
    """

    def __init__(
        self,
        stdin: IO[str] | TextIO | None = None,
        stdout: IO[str] | TextIO | None = None,
    ) -> None:
        """Create a new session for a pair of terminal streams.

        Args:
            stdin: The terminal's input stream. Defaults to the standard input
            stdout: The terminal's output stream. Defaults to the standard output

        """
        self.stdin = sys.stdin if stdin is None else stdin
        self.stdout = sys.stdout if stdout is None else stdout
        self._raw_depth = 0
        self._raw_stack = ExitStack()

    @property
    def queryable(self) -> bool:
        """Determine if queries can be exchanged with the terminal."""
        return (
            _have_termios_tty_fcntl()
            and _fileno(self.stdin) is not None
            and all(
                stream.isatty()
                # Don't send escape codes if this is not a real TTY
                and not getattr(stream, "fake_tty", False)
                for stream in (self.stdin, self.stdout)
            )
        )

    @property
    def in_raw_mode(self) -> bool:
        """Whether the terminal is currently held in raw mode by this session."""
        return self._raw_depth > 0

    @contextmanager
    def raw(self) -> Iterator[None]:
        """Hold the terminal's input in raw mode within a context.

        The terminal's previous mode is restored when the outermost context exits,
        however it is exited.
        """
        if self._raw_depth == 0:
            from prompt_toolkit.input.vt100 import raw_mode

            fd = _fileno(self.stdin)
            if fd is None:
                raise NotATerminal("The terminal input has no file descriptor")
            self._raw_stack.enter_context(raw_mode(fd))
        self._raw_depth += 1
        try:
            yield
        finally:
            self._raw_depth -= 1
            if self._raw_depth == 0:
                self._raw_stack.close()

    def query(
        self,
        cmd: str,
        terminator: re.Pattern[str],
        timeout: float = DEFAULT_QUERY_TIMEOUT,
    ) -> str:
        """Send a query to the terminal and collect its response.

        Args:
            cmd: The escape sequence to send
            terminator: A pattern which matches the end of the expected response
            timeout: The number of seconds to wait for the response

        Returns:
            All text received from the terminal. This is an empty string if the
            terminal did not respond before the deadline.

        Raises:
            NotATerminal: If the streams are not connected to an interactive terminal

        """
        if not self.queryable:
            raise NotATerminal("Cannot query the terminal: not a TTY")

        fd = _fileno(self.stdin)
        if fd is None:
            raise NotATerminal("The terminal input has no file descriptor")
        data = ""
        with self.raw():
            self.stdout.write(cmd)
            self.stdout.flush()
            deadline = time.monotonic() + timeout
            while (remaining := deadline - time.monotonic()) > 0:
                readable, _, _ = select.select([fd], [], [], remaining)
                if not readable:
                    break
                chunk = os.read(fd, 1024)
                if not chunk:
                    break
                data += chunk.decode(errors="replace")
                if terminator.search(data):
                    return data
        log.debug("Terminal did not finish responding within %ss", timeout)
        return data


class TerminalQuery:
    """A class representing a terminal query.

    This allows a control sequence to sent to the terminal, the response interpreted,
    and the received value processed and stored.
    """

    default: Any | None = None
    cmd = ""
    pattern: re.Pattern[str] | None = None

    def __init__(self, passthrough_: bool = False) -> None:
        """Create a new instance of the terminal query.

        Args:
            passthrough_: Whether the command should be wrapped for terminal
                multiplexer passthrough

        """
        self.passthrough = passthrough_
        self._value: Any | None = None

    def verify(self, match: re.Match[str]) -> Any | None:
        """Verify the response from the terminal."""
        return None

    def _cmd(self) -> str:
        """Return the query's command."""
        return self.cmd

    def feed(self, data: str) -> None:
        """Interpret the terminal's response to this query.

        Args:
            data: Everything the terminal sent in response to the batch of queries

        """
        if self.pattern is not None and (match := self.pattern.search(data)):
            self._value = self.verify(match)
            log.debug("Got terminal response for '%s'", self.__class__.__name__)

    def cleanup(self) -> None:
        """Release any resources used by the query."""

    @property
    def value(self) -> Any:
        """Return the last known value for the query.

        Returns:
            The last value received, or the default value.

        """
        return self.default if self._value is None else self._value


class KittyGraphicsStatus(TerminalQuery):
    """A terminal query to check for kitty graphics support."""

    default = False
    cmd = "\x1b_Gi=31,s=1,v=1,a=q,t=d,f=24;AAAA\x1b\\"
    pattern = re.compile(r"\x1b_Gi=31;(?P<status>[^\x1b]*)\x1b\\")

    def _cmd(self) -> str:
        """Hide the command in case the terminal does not support this sequence."""
        return "\x1b[s" + passthrough(self.cmd, self.passthrough) + "\x1b[u\x1b[2K"

    def verify(self, match: re.Match[str]) -> bool:
        """Verify the terminal response means kitty graphics are supported."""
        return match.group("status") == "OK"


class KittyLocalStatus(KittyGraphicsStatus):
    """A terminal query to check if kitty can read image data from local files.

    A single pixel image is written to a temporary file, and the terminal is asked
    whether it can load it. The terminal deletes the file after reading it.
    """

    pattern = re.compile(r"\x1b_Gi=32;(?P<status>[^\x1b]*)\x1b\\")

    def __init__(self, passthrough_: bool = False) -> None:
        """Create a new instance of the local file query."""
        super().__init__(passthrough_)
        self.path: Path | None = None

    def _cmd(self) -> str:
        """Write a temporary image file and reference it in the query command."""
        try:
            with tempfile.NamedTemporaryFile(
                prefix=f"termpix-{KITTY_TEMP_FILE_MARKER}-", delete=False
            ) as f:
                f.write(b"\0\0\0")
        except OSError:
            log.debug("Could not create a temporary file for the kitty query")
            return ""
        self.path = Path(f.name)
        payload = b64encode(str(self.path).encode()).decode()
        cmd = f"\x1b_Gi=32,s=1,v=1,a=q,t=t,f=24;{payload}\x1b\\"
        return "\x1b[s" + passthrough(cmd, self.passthrough) + "\x1b[u\x1b[2K"

    def cleanup(self) -> None:
        """Remove the temporary file if the terminal did not."""
        if self.path is not None:
            with suppress(FileNotFoundError):
                self.path.unlink()
            self.path = None


class PixelDimensions(TerminalQuery):
    """A terminal query to check the terminal's dimensions in pixels."""

    default = (0, 0)
    cmd = "\x1b[14t"
    pattern = re.compile(r"\x1b\[4;(?P<y>\d+);(?P<x>\d+)t")

    def verify(self, match: re.Match[str]) -> tuple[int, int]:
        """Verify the terminal responded with pixel dimensions."""
        return int(match.group("x")), int(match.group("y"))


class CellDimensions(TerminalQuery):
    """A terminal query to check the terminal's dimensions in cells."""

    default = (0, 0)
    cmd = "\x1b[18t"
    pattern = re.compile(r"\x1b\[8;(?P<rows>\d+);(?P<cols>\d+)t")

    def verify(self, match: re.Match[str]) -> tuple[int, int]:
        """Verify the terminal responded with its size."""
        return int(match.group("cols")), int(match.group("rows"))


class DeviceAttributes(TerminalQuery):
    """A terminal query to check for sixel graphics support.

    Nearly every terminal answers this query, so it is sent last and its response
    marks the end of the terminal's replies.
    """

    default = False
    cmd = "\x1b[0c"
    pattern = DA_RESPONSE_PATTERN

    def verify(self, match: re.Match[str]) -> bool:
        """Verify the terminal response means sixel graphics are supported."""
        return "4" in match.group("params").split(";")


def kitty_env_hint() -> bool:
    """Check the environment for a terminal known to support kitty graphics."""
    return (
        "kitty" in os.environ.get("TERM", "")
        or bool(os.environ.get("KITTY_WINDOW_ID"))
        or os.environ.get("TERM_PROGRAM", "") in KITTY_TERM_PROGRAMS
    )


def iterm_env_hint() -> bool:
    """Check the environment for a terminal supporting iTerm inline images."""
    term_program = os.environ.get("TERM_PROGRAM", "")
    lc_terminal = os.environ.get("LC_TERMINAL", "")
    return (
        any(name in term_program for name in ITERM_TERM_PROGRAMS)
        or any(name in lc_terminal for name in ITERM_LC_TERMINALS)
        or bool(os.environ.get("KONSOLE_VERSION"))
    )


def sixel_env_hint() -> bool:
    """Check the environment for a terminal known to support sixel graphics."""
    return (
        os.environ.get("TERM", "") in SIXEL_TERMS
        or os.environ.get("TERM_PROGRAM", "") == "MacTerm"
        or bool(os.environ.get("WT_SESSION"))
    )


def truecolor_available() -> bool:
    """Determine if the terminal advertises 24-bit color support."""
    colorterm = os.environ.get("COLORTERM", "")
    return "truecolor" in colorterm or "24bit" in colorterm


class TerminalInfo:
    """A class to gather and hold information about the terminal."""

    def __init__(
        self,
        session: TerminalSession,
        timeout: float = DEFAULT_QUERY_TIMEOUT,
        passthrough_: bool = False,
    ) -> None:
        """Instantiate the terminal information class.

        Args:
            session: The terminal session used to send queries
            timeout: The number of seconds to wait for the terminal to respond
            passthrough_: Whether queries should be wrapped for terminal multiplexer
                passthrough

        """
        self.session = session
        self.timeout = timeout
        self.passthrough = passthrough_
        self.queries: dict[type[TerminalQuery], TerminalQuery] = {}

        self.kitty_graphics_status = self.register(KittyGraphicsStatus)
        self.kitty_local_status = self.register(KittyLocalStatus)
        self.pixel_dimensions = self.register(PixelDimensions)
        self.cell_dimensions = self.register(CellDimensions)
        # Must be registered last, as the response terminates the exchange
        self.device_attributes = self.register(DeviceAttributes)

    def register(self, query: type[TerminalQuery]) -> TerminalQuery:
        """Instantiate and register a query."""
        query_inst = query(passthrough_=self.passthrough)
        self.queries[query] = query_inst
        return query_inst

    def send_all(self) -> bool:
        """Send every query in a single exchange and interpret the responses.

        Returns:
            :py:const:`True` if the terminal could be queried

        """
        if not self.session.queryable:
            log.debug("Not querying terminal as it is not a TTY")
            return False
        try:
            cmd = "".join(query._cmd() for query in self.queries.values())
            data = self.session.query(
                cmd, terminator=DA_RESPONSE_PATTERN, timeout=self.timeout
            )
        finally:
            for query in self.queries.values():
                query.cleanup()
        log.debug("Terminal responded with %r", data)
        for query in self.queries.values():
            query.feed(data)
        return True

    @property
    def cell_size_px(self) -> tuple[int, int] | None:
        """Get the pixel size of a single terminal cell, if it can be determined."""
        px, py = self.pixel_dimensions.value
        cols, rows = self.cell_dimensions.value
        if not (px and py and cols and rows):
            # If unsuccessful, try requesting info with tiocgwinsz
            fd = _fileno(self.session.stdout)
            if fd is None:
                return None
            rows, cols, px, py = _tiocgwinsz(fd)
        if px and py and cols and rows:
            cell_x, cell_y = px // cols, py // rows
            # A terminal reporting fewer pixels than cells gives no usable size
            if cell_x >= 1 and cell_y >= 1:
                return cell_x, cell_y
        return None

    def capabilities(self) -> TerminalCapabilities:
        """Query the terminal and report which graphics protocols it supports."""
        if not self.send_all():
            return TerminalCapabilities.unsupported()

        kitty = self.kitty_graphics_status.value or kitty_env_hint()
        cell_size_px = self.cell_size_px
        sixel = bool(
            (self.device_attributes.value or sixel_env_hint()) and cell_size_px
        )
        capabilities = TerminalCapabilities(
            kitty_local=bool(kitty and self.kitty_local_status.value),
            kitty_remote=bool(kitty),
            iterm=iterm_env_hint(),
            sixel=sixel,
            cell_size_px=cell_size_px,
        )
        log.debug("Detected terminal capabilities: %s", capabilities)
        return capabilities


@lru_cache
def get_capabilities(
    timeout: float = DEFAULT_QUERY_TIMEOUT, passthrough_: bool = False
) -> TerminalCapabilities:
    """Detect the capabilities of the controlling terminal.

    The result is cached for the lifetime of the process, as the terminal is assumed
    not to change while running.

    Args:
        timeout: The number of seconds to wait for the terminal to respond
        passthrough_: Whether queries should be wrapped for terminal multiplexer
            passthrough

    Returns:
        The terminal's detected capabilities

    """
    return TerminalInfo(
        TerminalSession(), timeout=timeout, passthrough_=passthrough_
    ).capabilities()
