# src/phinx_phar/logs.py
"""Project logger.

One `phinx_phar` logger with an extra TRACE level below DEBUG. Every line
is stamped like "[19.10.2026 14:03:59] Compilation...". Info and below
go to stdout; warnings and above go to stderr. The level and color
setting live in `current_runtime` so the CLI can change them mid-run.
"""

import logging
import sys
from typing import Any, TextIO, cast

from .meta import PROGRAM_PACKAGE
from .runtime import current_runtime
from .utils import safe_log

# --- ANSI colors -------------------------------------------------------------

RESET = "\033[0m"
CYAN = "\033[36m"
YELLOW = "\033[93m"
RED = "\033[91m"
GRAY = "\033[90m"

# --- levels ------------------------------------------------------------------

TRACE_LEVEL = logging.DEBUG - 5
SILENT_LEVEL = logging.CRITICAL + 1
logging.addLevelName(TRACE_LEVEL, "TRACE")

LEVEL_ORDER = ["trace", "debug", "info", "warning", "error", "critical", "silent"]

_EXTRA_LEVELS = {"trace": TRACE_LEVEL, "silent": SILENT_LEVEL}
LEVEL_MAP: dict[str, int] = {
    name.upper(): _EXTRA_LEVELS.get(name) or getattr(logging, name.upper())
    for name in LEVEL_ORDER
}

# level name → (color, tag); info lines carry no tag
TAG_STYLES: dict[str, tuple[str, str]] = {
    "TRACE": (GRAY, "[TRACE]"),
    "DEBUG": (CYAN, "[DEBUG]"),
    "WARNING": (YELLOW, "⚠️ "),
    "ERROR": (RED, "❌ "),
    "CRITICAL": (RED, "💥 "),
}

TIMESTAMP_FORMAT = "[%d.%m.%Y %H:%M:%S]"


class LoggerWithTrace(logging.Logger):
    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)

    def error_if_not_debug(self, msg: str, *args: Any) -> None:
        """Log an error; attach the active traceback only when debugging."""
        self.error(msg, *args, exc_info=self.isEnabledFor(logging.DEBUG))

    def critical_if_not_debug(self, msg: str, *args: Any) -> None:
        self.critical(msg, *args, exc_info=self.isEnabledFor(logging.DEBUG))

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level).lower()


class TagFormatter(logging.Formatter):
    """Prefix each line with the timestamp and, when styled, a level tag."""

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        stamp = self.formatTime(record, self.datefmt)
        color, tag = TAG_STYLES.get(record.levelname, ("", ""))
        if not tag:
            return f"{stamp} {msg}"
        return f"{stamp} {colorize(tag, color)} {msg}"


class DualStreamHandler(logging.StreamHandler[TextIO]):
    """Send info/debug/trace to stdout, everything else to stderr.

    The target stream is looked up for every record, so a replaced
    sys.stdout/sys.stderr (pytest capture, redirection) is honoured.
    """

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stderr if record.levelno >= logging.WARNING else sys.stdout
        super().emit(record)


# --- logger instance ---------------------------------------------------------

_previous_logger_class = logging.getLoggerClass()
logging.setLoggerClass(LoggerWithTrace)
_logger = cast("LoggerWithTrace", logging.getLogger(PROGRAM_PACKAGE))
logging.setLoggerClass(_previous_logger_class)


def _configure() -> None:
    if not any(isinstance(h, DualStreamHandler) for h in _logger.handlers):
        handler = DualStreamHandler()
        handler.setFormatter(TagFormatter("%(message)s", datefmt=TIMESTAMP_FORMAT))
        _logger.addHandler(handler)
        _logger.propagate = False

    level_name = current_runtime.get("log_level")
    if not level_name:
        safe_log("[LOGGER ERROR] ❌ Runtime does not specify log_level")
        level_name = "error"
    _logger.setLevel(LEVEL_MAP.get(str(level_name).upper(), logging.INFO))


def get_logger() -> LoggerWithTrace:
    """Return the project logger, synced with the runtime log level."""
    _configure()
    return _logger


def set_log_level(level: str) -> None:
    """Set the logging level for the rest of the run."""
    current_runtime["log_level"] = level
    _configure()


def colorize(text: str, color: str, *, use_color: bool | None = None) -> str:
    if use_color is None:
        use_color = current_runtime["use_color"]
    return f"{color}{text}{RESET}" if use_color and color else text
