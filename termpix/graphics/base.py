"""Contains the base class for terminal image printers."""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from io import BytesIO
from typing import TYPE_CHECKING, ClassVar

from termpix.errors import EncodingError, InvalidConfiguration
from termpix.resize import DEFAULT_CELL_SIZE_PX

if TYPE_CHECKING:
    from PIL.Image import Image as PilImage
    from prompt_toolkit.output import Output

    from termpix.data_structures import (
        Dimensions,
        PrintConfig,
        PrintOutcome,
        TerminalCapabilities,
    )
    from termpix.enums import Protocol

__all__ = ["Printer"]

log = logging.getLogger(__name__)


class Printer(metaclass=ABCMeta):
    """Defines a base class for printing images using a terminal graphics protocol."""

    protocol: ClassVar[Protocol]
    #: Whether images are resampled to the target pixel size before printing
    resample: ClassVar[bool] = True

    def cell_size(self, capabilities: TerminalCapabilities) -> tuple[int, int]:
        """Return the number of image pixels drawn in each terminal cell.

        Args:
            capabilities: The detected capabilities of the terminal

        Returns:
            The width and height of a cell in image pixels

        """
        return capabilities.cell_size_px or DEFAULT_CELL_SIZE_PX

    def print(
        self,
        image: PilImage,
        size: Dimensions,
        config: PrintConfig,
        output: Output,
    ) -> PrintOutcome:
        """Print an image to the terminal.

        Args:
            image: The RGBA image to print, already resampled if required
            size: The target size of the image
            config: The print configuration
            output: The output to write to

        Returns:
            The size of the printed image in terminal cells

        """
        self.adjust_offset(config, output)
        outcome = self.draw(image, size, config, output)
        output.flush()
        return outcome

    @abstractmethod
    def draw(
        self,
        image: PilImage,
        size: Dimensions,
        config: PrintConfig,
        output: Output,
    ) -> PrintOutcome:
        """Write the escape sequences which display the image at the cursor."""
        ...

    @staticmethod
    def adjust_offset(config: PrintConfig, output: Output) -> None:
        """Move the cursor to the position at which the image is printed.

        Absolute offsets are measured from the top left of the terminal. Relative
        offsets move the cursor up (for negative ``y`` values) or down from the current
        line, then right.

        Args:
            config: The print configuration
            output: The output to write to

        Raises:
            InvalidConfiguration: If the offset cannot be reached

        """
        if config.x < 0:
            raise InvalidConfiguration("The x offset cannot be negative")
        if config.absolute_offset:
            if config.y < 0:
                raise InvalidConfiguration(
                    "The y offset cannot be negative when the offset is absolute"
                )
            output.cursor_goto(config.y + 1, config.x + 1)
        else:
            if config.y < 0:
                # Move to the start of a previous line
                output.write_raw(f"\x1b[{-config.y}F")
            elif config.y > 0:
                output.write_raw("\n" * config.y)
            output.cursor_forward(config.x)


def png_bytes(image: PilImage) -> bytes:
    """Compress an image to PNG format.

    Args:
        image: The image to compress

    Returns:
        The PNG data

    Raises:
        EncodingError: If the image could not be compressed

    """
    buffer = BytesIO()
    try:
        image.save(buffer, format="PNG")
    except (OSError, ValueError) as error:
        raise EncodingError("Could not compress the image as PNG") from error
    return buffer.getvalue()
