"""Logging configuration for netinfo.

Provides colored console output and optional file logging.
Uses % formatting (PEP 391) for security.
"""

import logging
import sys
from pathlib import Path

from colors import AllColors

# Libraries that log request details at DEBUG
THIRD_PARTY_LOGGERS = ("urllib3", "requests")

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Marks handlers installed by setup_logging so a second call replaces them
_HANDLER_TAG = "_netinfo_handler"


class ColoredFormatter(logging.Formatter):
    """Add ANSI colors to log levels."""

    COLORS = {
        "DEBUG": AllColors.BRIGHT_CYAN,
        "INFO": AllColors.BRIGHT_GREEN,
        "WARNING": AllColors.BRIGHT_YELLOW,
        "ERROR": AllColors.BRIGHT_RED,
        "CRITICAL": AllColors.BRIGHT_MAGENTA,
    }
    RESET = AllColors.RESET

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors.

        The record itself is left untouched so other handlers (the log
        file) still see the plain level name.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with color codes.
        """
        levelname = record.levelname
        color = self.COLORS.get(levelname)
        if color is None:
            return super().format(record)

        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _tag(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG, True)
    return handler


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    use_colors: bool | None = None,
) -> None:
    """Configure logging.

    Safe to call more than once: handlers from a previous call are
    replaced, not duplicated.

    Args:
        verbose: Enable DEBUG level (default: WARNING+ only)
        log_file: Optional file output path (always DEBUG)
        use_colors: Color the console level names (default: when stderr
            is a terminal)
    """
    level = logging.DEBUG if verbose else logging.WARNING
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if (verbose or log_file) else logging.WARNING)

    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    if use_colors is None:
        use_colors = sys.stderr.isatty()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    if use_colors:
        console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(_tag(console_handler))

    # File handler
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(_tag(file_handler))

    # Suppress third-party loggers in default mode
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get logger for module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance for the module.
    """
    return logging.getLogger(name)
