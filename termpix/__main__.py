"""Main entry point into termpix."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from termpix.config import Config
from termpix.data_structures import PrintConfig
from termpix.errors import TermpixError
from termpix.printer import print_from_file
from termpix.terminal import get_capabilities

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger("termpix")


def main(args: Sequence[str] | None = None) -> int:
    """Print each image given on the command line in the terminal.

    Args:
        args: Command line arguments. Defaults to :py:data:`sys.argv`

    Returns:
        The exit status: zero if every image was printed

    """
    config = Config(
        _help="Print images in the terminal using the best graphics protocol "
        "available."
    )
    config.load(args)

    print_config = PrintConfig.from_config(config)
    capabilities = get_capabilities(
        config.query_timeout, config.multiplexer_passthrough
    )

    status = 0
    for path in config.files:
        try:
            print_from_file(path, config=print_config, capabilities=capabilities)
        except (TermpixError, OSError) as error:
            log.error("Could not print '%s': %s", path, error)
            status = 1
    return status


if __name__ == "__main__":
    sys.exit(main())
