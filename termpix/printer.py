"""Select a terminal graphics protocol and print images with it."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PIL import Image, UnidentifiedImageError
from upath import UPath

from termpix.data_structures import PrintConfig
from termpix.enums import Protocol
from termpix.errors import EncodingError
from termpix.graphics import (
    BlockPrinter,
    ItermPrinter,
    KittyPrinter,
    SixelPrinter,
)
from termpix.io import create_output
from termpix.resize import fit_dimensions, resize_image
from termpix.terminal import get_capabilities

if TYPE_CHECKING:
    from os import PathLike

    from PIL.Image import Image as PilImage
    from prompt_toolkit.output import Output

    from termpix.data_structures import PrintOutcome, TerminalCapabilities
    from termpix.graphics import Printer

__all__ = ["select_printer", "print_image", "print_from_file"]

log = logging.getLogger(__name__)


def select_printer(
    config: PrintConfig, capabilities: TerminalCapabilities
) -> Printer:
    """Choose the printer used to display an image.

    A protocol forced in the configuration is always used, whether or not the terminal
    appears to support it. Otherwise the most capable supported protocol is chosen,
    falling back to half-block characters, which work everywhere.

    Args:
        config: The print configuration
        capabilities: The detected capabilities of the terminal

    Returns:
        A printer instance

    """
    if (protocol := config.protocol) is not None:
        log.debug("Using forced protocol '%s'", protocol.value)
        if protocol == Protocol.KITTY:
            return KittyPrinter(local=capabilities.kitty_local)
        elif protocol == Protocol.ITERM:
            return ItermPrinter()
        elif protocol == Protocol.SIXEL:
            return SixelPrinter()
        return BlockPrinter()

    if config.use_kitty and capabilities.kitty_local:
        return KittyPrinter(local=True)
    if config.use_kitty and capabilities.kitty_remote:
        return KittyPrinter(local=False)
    if config.use_iterm and capabilities.iterm:
        return ItermPrinter()
    if config.use_sixel and capabilities.sixel:
        return SixelPrinter()
    return BlockPrinter()


def print_image(
    image: PilImage,
    config: PrintConfig | None = None,
    output: Output | None = None,
    capabilities: TerminalCapabilities | None = None,
) -> PrintOutcome:
    """Print an image in the terminal.

    Args:
        image: The image to print
        config: The print configuration. Defaults are used if not given
        output: The output to write to. Defaults to the standard output
        capabilities: The capabilities of the terminal. These are detected by querying
            the terminal if not given

    Returns:
        The size of the printed image in terminal cells

    """
    if config is None:
        config = PrintConfig()
    if output is None:
        output = create_output()
    if capabilities is None:
        capabilities = get_capabilities(passthrough_=config.multiplexer_passthrough)

    printer = select_printer(config, capabilities)
    term_size = output.get_size()
    size = fit_dimensions(
        image.size,
        width=config.width,
        height=config.height,
        cell_size=printer.cell_size(capabilities),
        terminal_size=(term_size.columns, term_size.rows),
        clip=config.resize,
    )
    log.debug(
        "Printing %sx%s image at %sx%s cells using %s",
        *image.size,
        *size.cells,
        type(printer).__name__,
    )

    if image.mode != "RGBA":
        image = image.convert("RGBA")
    if printer.resample:
        image = resize_image(image, size.pixels)

    if config.restore_cursor:
        output.write_raw("\x1b[s")
    outcome = printer.print(image, size, config, output)
    if config.restore_cursor:
        output.write_raw("\x1b[u")
        output.flush()
    return outcome


def print_from_file(
    path: str | PathLike[str],
    config: PrintConfig | None = None,
    output: Output | None = None,
    capabilities: TerminalCapabilities | None = None,
) -> PrintOutcome:
    """Load an image from a file or URL and print it in the terminal.

    Args:
        path: The location of the image
        config: The print configuration. Defaults are used if not given
        output: The output to write to. Defaults to the standard output
        capabilities: The capabilities of the terminal. These are detected by querying
            the terminal if not given

    Returns:
        The size of the printed image in terminal cells

    Raises:
        EncodingError: If the image could not be decoded

    """
    upath = UPath(path)
    log.debug("Loading image from '%s'", upath)
    with upath.open("rb") as f:
        try:
            image = Image.open(f)
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError) as error:
            raise EncodingError(f"Could not decode image '{upath}'") from error
    return print_image(image, config=config, output=output, capabilities=capabilities)
