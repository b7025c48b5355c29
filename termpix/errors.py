"""Define the exceptions raised when printing images."""


class TermpixError(Exception):
    """Base class for all errors raised by termpix."""


class NotATerminal(TermpixError):
    """Raised when a terminal query is attempted without an interactive terminal."""


class InvalidConfiguration(TermpixError, ValueError):
    """Raised when the print configuration cannot be honoured."""


class EncodingError(TermpixError):
    """Raised when an image cannot be encoded for the chosen protocol."""
