"""Contains a printer which uses the kitty terminal graphics protocol."""

from __future__ import annotations

import logging
import tempfile
from base64 import b64encode
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING

from termpix.data_structures import PrintOutcome
from termpix.enums import Protocol
from termpix.errors import EncodingError
from termpix.graphics.base import Printer, png_bytes
from termpix.io import passthrough
from termpix.terminal import KITTY_TEMP_FILE_MARKER

if TYPE_CHECKING:
    from typing import Any

    from PIL.Image import Image as PilImage
    from prompt_toolkit.output import Output

    from termpix.data_structures import Dimensions, PrintConfig

__all__ = ["KittyPrinter"]

log = logging.getLogger(__name__)

CHUNK_SIZE = 4096


def _kitty_cmd(chunk: str = "", **params: Any) -> str:
    """Format a kitty graphics protocol command.

    Args:
        chunk: The command's payload
        params: The command's control data. Parameters with a value of
            :py:const:`None` are omitted

    Returns:
        The escape sequence for the command

    """
    param_str = ",".join(
        [f"{key}={value}" for key, value in params.items() if value is not None]
    )
    cmd = f"\x1b_G{param_str}"
    if chunk:
        cmd += f";{chunk}"
    cmd += "\x1b\\"
    return cmd


class KittyPrinter(Printer):
    """Print images using the kitty terminal graphics protocol.

    If the terminal can read files from this machine, the image is written to a
    temporary file which the terminal loads and then deletes. Otherwise, the image
    data is sent to the terminal in base64 encoded chunks.
    """

    protocol = Protocol.KITTY
    resample = False

    def __init__(self, local: bool = False) -> None:
        """Create a new kitty printer.

        Args:
            local: Whether the image should be transferred using a temporary file

        """
        self.local = local

    def delete_cmd(self, config: PrintConfig) -> str:
        """Return a command which deletes images at the target position."""
        if config.absolute_offset:
            return _kitty_cmd(a="d", d="p", x=config.x + 1, y=config.y + 1, q=2)
        return _kitty_cmd(a="d", d="c", q=2)

    def _write_temp_file(self, data: bytes) -> Path:
        """Write image data to a temporary file which the terminal is allowed to read.

        Args:
            data: The PNG image data

        Returns:
            The path of the temporary file

        Raises:
            EncodingError: If the file could not be written

        """
        try:
            with tempfile.NamedTemporaryFile(
                prefix=f"termpix-{KITTY_TEMP_FILE_MARKER}-",
                suffix=".png",
                delete=False,
            ) as f:
                f.write(data)
        except OSError as error:
            raise EncodingError(
                "Could not create a temporary file for the image"
            ) from error
        log.debug("Wrote image to temporary file '%s'", f.name)
        return Path(f.name)

    def _local_cmd(self, path: Path, size: Dimensions) -> str:
        """Return a command which loads the image from a temporary file."""
        return _kitty_cmd(
            chunk=b64encode(str(path).encode()).decode(),
            a="T",  # Transmit and display the image
            t="t",  # Temporary file, deleted by the terminal once read
            f=100,  # Sending a PNG image
            c=size.cols,
            r=size.rows,
            q=2,  # No chatback
        )

    def _remote_cmds(self, data: bytes, size: Dimensions) -> list[str]:
        """Split base64 encoded image data over multiple commands."""
        payload = b64encode(data).decode()
        cmds = []
        while payload:
            chunk, payload = payload[:CHUNK_SIZE], payload[CHUNK_SIZE:]
            if cmds:
                cmds.append(_kitty_cmd(chunk=chunk, q=2, m=1 if payload else 0))
            else:
                cmds.append(
                    _kitty_cmd(
                        chunk=chunk,
                        a="T",  # Transmit and display the image
                        t="d",  # Transferring the image directly
                        f=100,  # Sending a PNG image
                        c=size.cols,
                        r=size.rows,
                        q=2,  # No chatback
                        m=1 if payload else 0,  # Data will be chunked
                    )
                )
        return cmds

    def draw(
        self,
        image: PilImage,
        size: Dimensions,
        config: PrintConfig,
        output: Output,
    ) -> PrintOutcome:
        """Send the image to the terminal."""
        if config.kitty_delete:
            output.write_raw(
                passthrough(self.delete_cmd(config), config.multiplexer_passthrough)
            )

        data = png_bytes(image)
        path: Path | None = None
        if self.local:
            path = self._write_temp_file(data)
            cmds = [self._local_cmd(path, size)]
        else:
            cmds = self._remote_cmds(data, size)

        try:
            for cmd in cmds:
                output.write_raw(passthrough(cmd, config.multiplexer_passthrough))
            output.write_raw("\n")
            output.flush()
        except OSError:
            # The terminal never saw the file, so it will not delete it
            if path is not None:
                with suppress(FileNotFoundError):
                    path.unlink()
            raise

        return PrintOutcome(width=size.cols, height=size.rows)
