"""Contains a printer which uses the iTerm inline image protocol."""

from __future__ import annotations

import logging
from base64 import b64encode
from typing import TYPE_CHECKING

from termpix.data_structures import PrintOutcome
from termpix.enums import Protocol
from termpix.graphics.base import Printer, png_bytes
from termpix.io import passthrough

if TYPE_CHECKING:
    from PIL.Image import Image as PilImage
    from prompt_toolkit.output import Output

    from termpix.data_structures import Dimensions, PrintConfig

__all__ = ["ItermPrinter"]

log = logging.getLogger(__name__)


class ItermPrinter(Printer):
    """Print images using iTerm's inline image protocol."""

    protocol = Protocol.ITERM
    resample = False

    def draw(
        self,
        image: PilImage,
        size: Dimensions,
        config: PrintConfig,
        output: Output,
    ) -> PrintOutcome:
        """Send the image to the terminal as base64 encoded PNG data."""
        data = png_bytes(image)
        b64data = b64encode(data).decode()
        cmd = (
            "\x1b]1337;File=inline=1;preserveAspectRatio=1"
            f";size={len(data)};width={size.cols};height={size.rows}"
            f":{b64data}\x07"
        )
        output.write_raw(passthrough(cmd, config.multiplexer_passthrough))
        output.write_raw("\n")
        return PrintOutcome(width=size.cols, height=size.rows)
