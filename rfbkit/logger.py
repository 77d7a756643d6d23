"""Levelled console logger used throughout the package."""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import Any, TextIO


class LogLevel(IntEnum):
    """Severity levels, from most to least verbose."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5


_PREFIXES = {
    LogLevel.TRACE: "[Trace]",
    LogLevel.DEBUG: "[Debug]",
    LogLevel.INFO: "[Info ]",
    LogLevel.WARN: "[Warn ]",
    LogLevel.ERROR: "[Error]",
    LogLevel.FATAL: "[Fatal]",
}


def _format(fmt: str, args: tuple[Any, ...]) -> str:
    """Apply printf-style formatting, accepting ``%v`` as a generic verb."""
    fmt = fmt.replace("%v", "%s")
    try:
        return fmt % args
    except (TypeError, ValueError):
        return " ".join([fmt, *map(str, args)])


class SimpleLogger:
    """Writes messages at or above a threshold level to a text stream."""

    def __init__(self, level: LogLevel | int = LogLevel.WARN, stream: TextIO | None = None) -> None:
        self.level = LogLevel(level)
        self.stream = stream

    def _out(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stdout

    def _enabled(self, level: LogLevel) -> bool:
        return self.level <= level

    def log(self, level: LogLevel | int, *args: Any) -> None:
        """Print the arguments separated by spaces, after the level prefix."""
        level = LogLevel(level)
        if self._enabled(level):
            print(_PREFIXES[level], *args, file=self._out())

    def logf(self, level: LogLevel | int, fmt: str, *args: Any) -> None:
        """Print a formatted line after the level prefix."""
        level = LogLevel(level)
        if self._enabled(level):
            self._out().write(f"{_PREFIXES[level]} {_format(fmt, args)}\n")

    def trace(self, *args: Any) -> None:
        self.log(LogLevel.TRACE, *args)

    def tracef(self, fmt: str, *args: Any) -> None:
        self.logf(LogLevel.TRACE, fmt, *args)

    def debug(self, *args: Any) -> None:
        self.log(LogLevel.DEBUG, *args)

    def debugf(self, fmt: str, *args: Any) -> None:
        self.logf(LogLevel.DEBUG, fmt, *args)

    def debugf_no_cr(self, fmt: str, *args: Any) -> None:
        """Debug-level formatted output without a trailing newline."""
        if self._enabled(LogLevel.DEBUG):
            self._out().write(f"{_PREFIXES[LogLevel.INFO]} {_format(fmt, args)}")

    def info(self, *args: Any) -> None:
        self.log(LogLevel.INFO, *args)

    def infof(self, fmt: str, *args: Any) -> None:
        self.logf(LogLevel.INFO, fmt, *args)

    def warn(self, *args: Any) -> None:
        self.log(LogLevel.WARN, *args)

    def warnf(self, fmt: str, *args: Any) -> None:
        self.logf(LogLevel.WARN, fmt, *args)

    def error(self, *args: Any) -> None:
        self.log(LogLevel.ERROR, *args)

    def errorf(self, fmt: str, *args: Any) -> None:
        self.logf(LogLevel.ERROR, fmt, *args)

    def fatal(self, *args: Any) -> None:
        self.log(LogLevel.FATAL, *args)

    def fatalf(self, fmt: str, *args: Any) -> None:
        self.logf(LogLevel.FATAL, fmt, *args)


_default = SimpleLogger(LogLevel.WARN)


def set_log_level(level: LogLevel | int) -> None:
    """Change the threshold of the shared logger."""
    level = LogLevel(level)
    print("Log level set to: ", int(level))
    _default.level = level


def get_logger() -> SimpleLogger:
    """Return the shared logger."""
    return _default


def trace(*args: Any) -> None:
    _default.trace(*args)


def tracef(fmt: str, *args: Any) -> None:
    _default.tracef(fmt, *args)


def debug(*args: Any) -> None:
    _default.debug(*args)


def debugf(fmt: str, *args: Any) -> None:
    # The shared formatted debug output is emitted at trace level.
    _default.tracef(fmt, *args)


def debugf_no_cr(fmt: str, *args: Any) -> None:
    _default.debugf_no_cr(fmt, *args)


def info(*args: Any) -> None:
    _default.info(*args)


def infof(fmt: str, *args: Any) -> None:
    _default.infof(fmt, *args)


def warn(*args: Any) -> None:
    _default.warn(*args)


def warnf(fmt: str, *args: Any) -> None:
    _default.warnf(fmt, *args)


def error(*args: Any) -> None:
    _default.error(*args)


def errorf(fmt: str, *args: Any) -> None:
    _default.errorf(fmt, *args)


def fatal(*args: Any) -> None:
    _default.fatal(*args)


def fatalf(fmt: str, *args: Any) -> None:
    _default.fatalf(fmt, *args)