"""Print images in the terminal using the best graphics protocol available."""

__app_name__ = "termpix"
__version__ = "0.1.0"
__strapline__ = "Images in the terminal"
__author__ = "The termpix developers"
__copyright__ = f"© 2026, {__author__}"
__license__ = "MIT"

from termpix.data_structures import (  # noqa: E402
    PrintConfig,
    PrintOutcome,
    TerminalCapabilities,
)
from termpix.enums import Protocol, TransparencyMode  # noqa: E402
from termpix.errors import (  # noqa: E402
    EncodingError,
    InvalidConfiguration,
    NotATerminal,
    TermpixError,
)
from termpix.printer import print_from_file, print_image  # noqa: E402
from termpix.resize import fit_dimensions  # noqa: E402
from termpix.terminal import get_capabilities  # noqa: E402

# Register settings with the configuration
from termpix import _settings  # noqa: E402,F401

__all__ = [
    "EncodingError",
    "InvalidConfiguration",
    "NotATerminal",
    "PrintConfig",
    "PrintOutcome",
    "Protocol",
    "TerminalCapabilities",
    "TermpixError",
    "TransparencyMode",
    "fit_dimensions",
    "get_capabilities",
    "print_from_file",
    "print_image",
]
