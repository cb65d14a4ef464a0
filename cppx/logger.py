"""
Logger for cppx

A thin facade over the standard ``logging`` module:
- ``logger.debug/info/warning(msg, **context)`` log with optional key=value context
- ``logger.error(msg, exc_type=..., **context)`` logs and, when raising is
  enabled, raises ``exc_type(msg)``
- Terminal output is colored per level (red errors, yellow warnings)

Usage:
    from cppx.logger import logger, set_log_level, LogLevel

    logger.warning("Deprecated extension", ext=".cx")
    set_log_level(LogLevel.DEBUG)
"""

import logging
import os
import sys
from enum import IntEnum
from typing import Optional, Type

# Color codes
RED = '\033[91m'
YELLOW = '\033[93m'
BLUE = '\033[94m'
RESET = '\033[0m'

_LEVEL_COLORS = {
    logging.DEBUG: BLUE,
    logging.WARNING: YELLOW,
    logging.ERROR: RED,
}


class LogLevel(IntEnum):
    """Verbosity levels, aligned with the ``logging`` constants"""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class ColorFormatter(logging.Formatter):
    """Formatter that wraps each record in its level's terminal color"""

    def __init__(self, use_color: bool):
        super().__init__('%(message)s')
        self.use_color = use_color

    def format(self, record):
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            message = f"{record.levelname.lower()}: {message}"
        color = _LEVEL_COLORS.get(record.levelno)
        if self.use_color and color:
            return f"{color}{message}{RESET}"
        return message


def _stream_supports_color(stream) -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    return hasattr(stream, 'isatty') and stream.isatty()


def _format_context(context) -> str:
    if not context:
        return ''
    items = ', '.join(f"{key}={value}" for key, value in context.items())
    return f" [{items}]"


class Logger:
    """Project logger; see module docstring"""

    def __init__(self, name: str = 'cppx'):
        self._logger = logging.getLogger(name)
        self._logger.propagate = False
        self.raise_on_error = True
        if not self._logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(ColorFormatter(_stream_supports_color(sys.stderr)))
            self._logger.addHandler(handler)
        level_name = os.environ.get('CPPX_LOG_LEVEL', 'WARNING').upper()
        self._logger.setLevel(LogLevel.__members__.get(level_name, LogLevel.WARNING))

    @property
    def level(self) -> LogLevel:
        return LogLevel(self._logger.level)

    def set_level(self, level: LogLevel):
        self._logger.setLevel(int(level))

    def is_enabled_for(self, level: LogLevel) -> bool:
        return self._logger.isEnabledFor(int(level))

    def debug(self, msg: str, **context):
        self._logger.debug(msg + _format_context(context))

    def info(self, msg: str, **context):
        self._logger.info(msg + _format_context(context))

    def warning(self, msg: str, **context):
        self._logger.warning(msg + _format_context(context))

    def error(self, msg: str, exc_type: Optional[Type[Exception]] = None, **context):
        """Log an error; raise ``exc_type(msg)`` if given and raising is enabled"""
        self._logger.error(msg + _format_context(context))
        if exc_type is not None and self.raise_on_error:
            raise exc_type(msg)


logger = Logger()


def set_log_level(level: LogLevel):
    logger.set_level(level)


def set_raise_on_error(enabled: bool):
    """Toggle whether ``logger.error(..., exc_type=...)`` raises"""
    logger.raise_on_error = enabled
