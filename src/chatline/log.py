"""Logging setup.

Library modules only create loggers; handlers are installed here, by the
command line front end.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns WARNING if invalid."""
        return cls._from_string.get(level_str.lower(), cls.WARNING)


def configure_logging(level: str | int = "warning", console: Console | None = None) -> logging.Logger:
    """Route the ``chatline`` loggers to a Rich handler.

    Calling it again replaces the handler instead of stacking a second one.

    Args:
        level: Level name ("debug", "info", ...) or numeric level
        console: Console to write to (defaults to stderr)

    Returns:
        The configured package logger
    """
    numeric = LogLevel.from_string(level) if isinstance(level, str) else level

    logger = logging.getLogger("chatline")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger
