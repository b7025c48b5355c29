"""Defines termpix's settings."""

import json

from upath import UPath

from termpix import __version__
from termpix.config import add_setting
from termpix.enums import Protocol, TransparencyMode
from termpix.terminal import DEFAULT_QUERY_TIMEOUT, truecolor_available

# termpix.config

add_setting(
    name="version",
    group="termpix.config",
    default=False,
    flags=["--version", "-V"],
    action="version",
    hidden=True,
    version=f"%(prog)s {__version__}",
    help_="Show the version number and exit",
    description="""
        If set, termpix will print the current version number and exit.

        .. note::

           This cannot be set in the configuration file or via an environment variable
    """,
)

# termpix.printer

add_setting(
    name="files",
    group="termpix.printer",
    flags=["files"],
    nargs="*",
    type_=UPath,
    default=[],
    schema={
        "type": "array",
        "items": {
            "description": "Image file path",
            "type": "string",
        },
    },
    help_="List of image file paths or URLs to print",
    description="""
        A list of images to print. Images are printed one after another, each
        starting at the cursor position left by the previous one.
    """,
)

add_setting(
    name="width",
    group="termpix.printer",
    flags=["--width", "-w"],
    type_=int,
    default=0,
    schema={"minimum": 0},
    help_="Width of the printed image in terminal columns",
    description="""
        The number of terminal columns the image should occupy. If only one of the
        width or height is given, the other is calculated from the image's aspect
        ratio. A value of zero means the width is determined automatically.
    """,
)

add_setting(
    name="height",
    group="termpix.printer",
    flags=["--height", "-H"],
    type_=int,
    default=0,
    schema={"minimum": 0},
    help_="Height of the printed image in terminal rows",
    description="""
        The number of terminal rows the image should occupy. A value of zero means
        the height is determined automatically.
    """,
)

add_setting(
    name="x",
    group="termpix.printer",
    flags=["-x"],
    type_=int,
    default=0,
    schema={"minimum": 0},
    help_="Column offset of the image",
    description="""
        The number of columns between the image and the cursor, or the left edge of
        the terminal if ``--absolute-offset`` is set.
    """,
)

add_setting(
    name="y",
    group="termpix.printer",
    flags=["-y"],
    type_=int,
    default=0,
    help_="Row offset of the image",
    description="""
        The number of rows between the image and the cursor, or the top edge of the
        terminal if ``--absolute-offset`` is set. Negative values move the image up
        and are only allowed for relative offsets.
    """,
)

add_setting(
    name="absolute_offset",
    group="termpix.printer",
    type_=bool,
    default=False,
    help_="Measure the image offset from the top left of the terminal",
    description="""
        When set, the ``x`` and ``y`` offsets are measured from the top left corner
        of the terminal rather than from the cursor position.
    """,
)

add_setting(
    name="restore_cursor",
    group="termpix.printer",
    type_=bool,
    default=False,
    help_="Return the cursor to its original position after printing",
    description="""
        When set, the cursor position is saved before the image is printed and
        restored afterwards.
    """,
)

add_setting(
    name="protocol",
    group="termpix.printer",
    flags=["--protocol", "-p"],
    type_=str,
    default="auto",
    choices=["auto", *(protocol.value for protocol in Protocol)],
    help_="The graphics protocol used to print images",
    description="""
        When set to ``auto``, the most capable protocol supported by the terminal is
        used. Any other value forces that protocol to be used, even if the terminal
        does not appear to support it.
    """,
)

add_setting(
    name="transparency",
    group="termpix.printer",
    type_=str,
    default=TransparencyMode.CHECKERBOARD.value,
    choices=[mode.value for mode in TransparencyMode],
    help_="How transparent pixels are drawn with block characters",
    description="""
        ``checkerboard`` blends transparent pixels over a checkerboard pattern,
        ``premultiplied`` multiplies colors by their alpha value, and
        ``transparent`` leaves fully transparent cells undrawn.
    """,
)

add_setting(
    name="truecolor",
    group="termpix.printer",
    type_=bool,
    default=truecolor_available(),
    help_="Use 24-bit colors",
    description="""
        When set, block characters are drawn using 24-bit colors, otherwise colors
        are reduced to the 256 color palette. Defaults to whether the ``COLORTERM``
        environment variable advertises 24-bit color support.
    """,
)

add_setting(
    name="use_kitty",
    group="termpix.printer",
    type_=bool,
    default=True,
    help_="Allow the kitty graphics protocol to be used",
)

add_setting(
    name="use_iterm",
    group="termpix.printer",
    type_=bool,
    default=True,
    help_="Allow the iTerm inline images protocol to be used",
)

add_setting(
    name="use_sixel",
    group="termpix.printer",
    type_=bool,
    default=True,
    help_="Allow sixel graphics to be used",
)

add_setting(
    name="kitty_delete",
    group="termpix.printer",
    type_=bool,
    default=False,
    help_="Delete kitty images at the target position before printing",
    description="""
        When set, images previously placed with the kitty graphics protocol at the
        target position are deleted before the new image is drawn.
    """,
)

add_setting(
    name="resize",
    group="termpix.printer",
    type_=bool,
    default=True,
    help_="Shrink images to fit inside the terminal",
    description="""
        When set, images printed without a requested size are shrunk to fit the
        terminal. Otherwise they are printed at their native size.
    """,
)

add_setting(
    name="multiplexer_passthrough",
    group="termpix.printer",
    type_=bool,
    default=False,
    help_="Pass graphics through tmux or screen",
    description="""
        When set, graphics escape sequences are wrapped so that the terminal
        multiplexer forwards them to the outer terminal.
    """,
)

# termpix.terminal

add_setting(
    name="query_timeout",
    group="termpix.terminal",
    type_=float,
    default=DEFAULT_QUERY_TIMEOUT,
    schema={"exclusiveMinimum": 0},
    help_="Seconds to wait for the terminal to respond to queries",
    description="""
        The terminal is queried to detect which graphics protocols it supports. This
        sets how long to wait for responses before assuming a feature is missing.
    """,
)

# termpix.log

add_setting(
    name="log_file",
    group="termpix.log",
    flags=["--log-file"],
    nargs="?",
    default="",
    type_=str,
    title="the log file path",
    help_="File path for logs",
    description="""
        When set to a file path, the log output will be written to the given path.
        A value of ``-`` sends log output to standard error.
    """,
)

add_setting(
    name="log_level",
    group="termpix.log",
    type_=str,
    default="warning",
    title="the log level",
    help_="Set the log level",
    choices=["debug", "info", "warning", "error", "critical"],
    description="""
        When set, logging events at the given level are emitted.
    """,
)

add_setting(
    name="log_level_stderr",
    group="termpix.log",
    hidden=True,
    type_=str,
    default="warning",
    title="the log level at which to log to standard error",
    help_="Set the log level printed to standard error",
    choices=["debug", "info", "warning", "error", "critical"],
    description="""
        When set, logging events at the given level are printed to standard error.
    """,
)

add_setting(
    name="log_config",
    group="termpix.log",
    flags=["--log-config"],
    type_=json.loads,
    default={},
    schema={
        "type": "object",
    },
    title="additional logging configuration",
    help_="Additional logging configuration",
    description="""
        A JSON string specifying additional logging configuration.
    """,
)
