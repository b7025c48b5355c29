"""Initiate logging for termpix."""

from __future__ import annotations

import logging
import logging.config
import sys
import textwrap
from pathlib import Path
from typing import TYPE_CHECKING

from prompt_toolkit.formatted_text.base import FormattedText, to_formatted_text
from prompt_toolkit.formatted_text.pygments import PygmentsTokens
from prompt_toolkit.shortcuts.utils import print_formatted_text
from prompt_toolkit.styles.pygments import style_from_pygments_cls
from prompt_toolkit.styles.style import Style, merge_styles
from pygments.lexers.python import PythonTracebackLexer

from termpix.io import create_output
from termpix.pygments import TermpixPygmentsStyle
from termpix.utils import dict_merge

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Any, TextIO

    from prompt_toolkit.formatted_text.base import StyleAndTextTuples
    from prompt_toolkit.styles.base import BaseStyle

    from termpix.config import Config

log = logging.getLogger(__name__)

LOG_STYLE = [
    ("log.level.nonset", "fg:ansigray"),
    ("log.level.debug", "fg:ansigreen"),
    ("log.level.info", "fg:ansiblue"),
    ("log.level.warning", "fg:ansiyellow"),
    ("log.level.error", "fg:ansired"),
    ("log.level.critical", "fg:ansiwhite bg:ansired bold"),
    ("log.ref", "fg:grey"),
    ("log.date", "fg:#00875f"),
]


class BufferedLogs(logging.Handler):
    """A handler that collects log records and replays them on exit."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize the collector.

        Args:
            logger: Logger to collect from and replay to. If None, uses root logger.
        """
        super().__init__()
        self.records: list[logging.LogRecord] = []
        self._logger = logger or logging.getLogger()
        self._original_handlers: list[logging.Handler] = []

    def emit(self, record: logging.LogRecord) -> None:
        """Store the log record."""
        self.records.append(record)

    def replay(self) -> None:
        """Replay collected logs through the original logger."""
        for record in self.records:
            self._logger.handle(record)

    def __enter__(self) -> BufferedLogs:
        """Store and replace the log handlers."""
        self._original_handlers = self._logger.handlers[:]
        self._logger.handlers.clear()
        self._logger.addHandler(self)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_traceback: TracebackType | None,
    ) -> None:
        """Restore the original handlers and replay the collected records."""
        self._logger.removeHandler(self)
        self._logger.handlers = self._original_handlers
        self.replay()


class FtFormatter(logging.Formatter):
    """Base class for formatted text logging formatter."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Create a new formatter instance."""
        super().__init__(*args, **kwargs)
        self.datefmt = self.datefmt or "%H:%M:%S"

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        """Format certain attributes on the log record."""
        record.asctime = self.formatTime(record, self.datefmt)
        record.message = record.getMessage()
        record.exc_text = ""
        if record.exc_info:
            record.exc_text = self.formatException(record.exc_info)
        return record

    def format_traceback(self, tb: str) -> StyleAndTextTuples:
        """Format a traceback string using pygments."""
        return to_formatted_text(
            PygmentsTokens(list(PythonTracebackLexer().get_tokens(tb)))
        )

    def ft_format(
        self, record: logging.LogRecord, width: int | None = None
    ) -> FormattedText:
        """Format a log record as :py:class:`FormattedText`."""
        return FormattedText([])


class StderrFormatter(FtFormatter):
    """A log formatter for formatting log entries for display on standard error."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Create a new formatter instance."""
        super().__init__(*args, **kwargs)
        self.last_date: str | None = None

    def ft_format(
        self, record: logging.LogRecord, width: int | None = None
    ) -> FormattedText:
        """Format log records for display on standard error."""
        width = width or 80
        record = self.prepare(record)

        date = f"{record.asctime}"
        if date == self.last_date:
            date = " " * len(date)
        else:
            self.last_date = date
        ref = f"{record.name}.{record.funcName}:{record.lineno}"

        msg_pad = len(date) + 10
        msg_lines = (
            textwrap.wrap(
                record.message,
                width=max(width - msg_pad, 20),
                replace_whitespace=False,
            )
            or [""]
        )

        output: StyleAndTextTuples = [
            ("class:log.date", date),
            ("", " " * (9 - len(record.levelname))),
            (f"class:log.level.{record.levelname.lower()}", record.levelname),
            ("", " "),
            ("", msg_lines[0]),
            ("", " "),
            ("class:log.ref", ref),
        ]
        for line in msg_lines[1:]:
            output += [("", "\n"), ("", " " * msg_pad), ("", line)]
        if record.exc_text:
            output += [("", "\n"), *self.format_traceback(record.exc_text)]
        output.append(("", "\n"))
        return FormattedText(output)


class FormattedTextHandler(logging.StreamHandler):
    """Format log records as colored text on a terminal stream."""

    formatter: FtFormatter

    def __init__(
        self,
        stream: TextIO | None = None,
        style: BaseStyle | None = None,
    ) -> None:
        """Create a new log handler instance.

        Args:
            stream: The stream to write to
            style: The style used to color log records

        """
        super().__init__(stream)
        self._style = style
        self.output = create_output(stdout=self.stream)

    @property
    def style(self) -> BaseStyle:
        """Calculate the style when accessed."""
        if self._style is None:
            self._style = merge_styles(
                [style_from_pygments_cls(TermpixPygmentsStyle), Style(LOG_STYLE)]
            )
        return self._style

    def ft_format(self, record: logging.LogRecord) -> FormattedText:
        """Format the specified record."""
        if self.formatter is not None:
            return self.formatter.ft_format(record, width=self.output.get_size()[1])
        else:
            return FormattedText([])

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a formatted record."""
        try:
            print_formatted_text(
                self.ft_format(record),
                end="",
                style=self.style,
                output=self.output,
                include_default_pygments_style=False,
            )
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


def handle_exception(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType | None,
) -> Any:
    """Log unhandled exceptions and their tracebacks in the log.

    Args:
        exc_type: The type of the exception
        exc_value: The exception instance
        exc_traceback: The associated traceback
    """
    # Check the exception is not a keyboard interrupt (Ctrl+C) - if so, so not log it
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    log.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))


def setup_logs(config: Config | None = None) -> None:
    """Configure the logger for termpix.

    Standard output is reserved for image data, so log records are printed to
    standard error.

    Args:
        config: The application configuration. If not given, warnings and errors are
            printed to standard error

    """
    log_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "file_format": {
                "format": "{asctime}.{msecs:03.0f} {levelname:<7} "
                "[{name}.{funcName}:{lineno}] {message}",
                "style": "{",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "stderr_format": {
                "()": StderrFormatter,
            },
        },
        "handlers": {
            "stderr": {
                "level": "WARNING",
                "()": FormattedTextHandler,
                "formatter": "stderr_format",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            "termpix": {
                "level": "WARNING",
                "handlers": ["stderr"],
                "propagate": False,
            },
        },
    }

    if config is not None:
        log_file = config.log_file or ""
        log_file_is_stderr = log_file in {"-", "/dev/stderr"}
        log_level = config.log_level.upper()

        # Configure file handler
        if log_file and not log_file_is_stderr:
            log_config["handlers"]["file"] = {
                "level": log_level,
                "class": "logging.FileHandler",
                "filename": Path(log_file).expanduser(),
                "formatter": "file_format",
            }
            log_config["loggers"]["termpix"]["handlers"].append("file")

        # Configure stderr handler
        if log_file_is_stderr:
            stderr_level = log_level
        else:
            stderr_level = config.log_level_stderr.upper()
        log_config["handlers"]["stderr"]["level"] = stderr_level

        # The logger must pass records for the most verbose handler
        log_config["loggers"]["termpix"]["level"] = min(
            log_level, stderr_level, key=logging.getLevelName
        )

        # Update log_config based on additional config dict provided
        if config.log_config:
            dict_merge(log_config, config.log_config)

    logging.config.dictConfig(log_config)

    # Capture warnings so they show up in the logs
    logging.captureWarnings(True)

    # Log uncaught exceptions
    sys.excepthook = handle_exception
