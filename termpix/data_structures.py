"""Contains commonly used data structures."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from termpix.enums import Protocol, TransparencyMode

if TYPE_CHECKING:
    from termpix.config import Config


class PrintConfig(NamedTuple):
    """Options controlling how a single image is printed.

    Attributes:
        x: The column offset of the image
        y: The row offset of the image. May only be negative when the offset is
            relative
        absolute_offset: If :py:const:`True`, the offset is measured from the top
            left corner of the terminal, otherwise from the cursor position
        width: The target width of the image in terminal cells
        height: The target height of the image in terminal cells
        restore_cursor: Whether the cursor is returned to its original position after
            the image has been printed
        protocol: Force a particular graphics protocol to be used
        transparency: How transparent pixels are drawn by the block printer
        truecolor: Use 24-bit colors rather than the 256 color palette
        use_kitty: Allow the kitty graphics protocol to be selected
        use_iterm: Allow the iTerm inline image protocol to be selected
        use_sixel: Allow sixel graphics to be selected
        kitty_delete: Delete kitty images at the target position before printing
        resize: Fit images with no requested size inside the terminal
        multiplexer_passthrough: Wrap graphics escape sequences so they pass through
            tmux or screen

    """

    x: int = 0
    y: int = 0
    absolute_offset: bool = False
    width: int | None = None
    height: int | None = None
    restore_cursor: bool = False
    protocol: Protocol | None = None
    transparency: TransparencyMode = TransparencyMode.CHECKERBOARD
    truecolor: bool = True
    use_kitty: bool = True
    use_iterm: bool = True
    use_sixel: bool = True
    kitty_delete: bool = False
    resize: bool = True
    multiplexer_passthrough: bool = False

    @classmethod
    def from_config(cls, config: Config) -> PrintConfig:
        """Construct print options from the application's configuration."""
        return cls(
            x=config.x,
            y=config.y,
            absolute_offset=config.absolute_offset,
            width=config.width or None,
            height=config.height or None,
            restore_cursor=config.restore_cursor,
            protocol=None if config.protocol == "auto" else Protocol(config.protocol),
            transparency=TransparencyMode(config.transparency),
            truecolor=config.truecolor,
            use_kitty=config.use_kitty,
            use_iterm=config.use_iterm,
            use_sixel=config.use_sixel,
            kitty_delete=config.kitty_delete,
            resize=config.resize,
            multiplexer_passthrough=config.multiplexer_passthrough,
        )


class PrintOutcome(NamedTuple):
    """The size of a printed image in terminal cells."""

    width: int
    height: int


class Dimensions(NamedTuple):
    """The size of an image in terminal cells and in pixels."""

    cols: int
    rows: int
    px_width: int
    px_height: int

    @property
    def cells(self) -> tuple[int, int]:
        """The size in cells as a ``(cols, rows)`` tuple."""
        return self.cols, self.rows

    @property
    def pixels(self) -> tuple[int, int]:
        """The size in pixels as a ``(width, height)`` tuple."""
        return self.px_width, self.px_height


class TerminalCapabilities(NamedTuple):
    """The graphics features supported by the terminal.

    Attributes:
        kitty_local: The kitty protocol is supported, and the terminal can read image
            data from files on this machine
        kitty_remote: The kitty protocol is supported with inline image data
        iterm: The iTerm inline image protocol is supported
        sixel: Sixel graphics are supported
        cell_size_px: The size of a terminal cell in pixels, if known

    """

    kitty_local: bool = False
    kitty_remote: bool = False
    iterm: bool = False
    sixel: bool = False
    cell_size_px: tuple[int, int] | None = None

    @classmethod
    def unsupported(cls) -> TerminalCapabilities:
        """Capabilities of a terminal which supports no graphics protocols."""
        return cls()
