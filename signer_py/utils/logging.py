"""Logging utilities for the signing pipeline."""

import logging
import sys
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    """Output level selected on the command line."""
    NONE = "none"
    INFO = "info"
    VERBOSE = "verbose"

    @classmethod
    def from_string(cls, value: str) -> "LogLevel":
        """Convert an --output-level value to a LogLevel."""
        try:
            return cls(value.lower())
        except ValueError:
            return cls.INFO


# Custom log levels
STEP = 25  # Between INFO and WARNING
RESULT = 24  # Between INFO and WARNING

ROOT_LOGGER_NAME = "signer_py"

_verbose_mode = False


def is_verbose() -> bool:
    """Check if verbose mode is enabled."""
    return _verbose_mode


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors and emojis to log messages."""

    COLORS = {
        logging.DEBUG: "\033[36m",    # Cyan
        logging.INFO: "\033[0m",      # Reset
        STEP: "\033[34m",             # Blue
        RESULT: "\033[32m",           # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",    # Red
        logging.CRITICAL: "\033[35m", # Magenta
    }
    RESET = "\033[0m"

    EMOJIS = {
        logging.DEBUG: "🔍",
        logging.INFO: "ℹ️ ",
        STEP: "📋",
        RESULT: "   -",
        logging.WARNING: "⚠️ ",
        logging.ERROR: "❌",
        logging.CRITICAL: "💥",
    }

    def format(self, record: logging.LogRecord) -> str:
        emoji = self.EMOJIS.get(record.levelno, "")
        color = self.COLORS.get(record.levelno, self.RESET)
        return f"{color}{emoji} {record.getMessage()}{self.RESET}"


class PlainFormatter(logging.Formatter):
    """Plain formatter without colors (for CI logs and redirected output)."""

    PREFIXES = {
        logging.DEBUG: "[DEBUG]",
        logging.INFO: "[INFO]",
        STEP: "[STEP]",
        RESULT: "  -",
        logging.WARNING: "[WARN]",
        logging.ERROR: "[ERROR]",
        logging.CRITICAL: "[CRITICAL]",
    }

    def format(self, record: logging.LogRecord) -> str:
        prefix = self.PREFIXES.get(record.levelno, "[LOG]")
        return f"{prefix} {record.getMessage()}"


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    use_colors: Optional[bool] = None,
    show_errors: bool = True,
) -> None:
    """
    Set up logging for the signer_py logger hierarchy.

    Errors and warnings are shown at every level unless ``show_errors`` is
    False; a failed stage must be visible even with --output-level none.

    Args:
        level: Desired output level
        use_colors: Whether to use colored output (auto-detect if None)
        show_errors: Whether warnings and errors pass at LogLevel.NONE
    """
    global _verbose_mode

    logging.addLevelName(STEP, "STEP")
    logging.addLevelName(RESULT, "RESULT")

    if level == LogLevel.NONE:
        log_level = logging.WARNING if show_errors else logging.CRITICAL + 1
        _verbose_mode = False
    elif level == LogLevel.VERBOSE:
        log_level = logging.DEBUG
        _verbose_mode = True
    else:
        log_level = logging.INFO
        _verbose_mode = False

    if use_colors is None:
        use_colors = sys.stderr.isatty()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(ColoredFormatter() if use_colors else PlainFormatter())

    root_logger.addHandler(handler)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name, normally the caller's ``__name__``

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_step(self: logging.Logger, message: str, *args, **kwargs) -> None:
    """Log a stage entry message."""
    if self.isEnabledFor(STEP):
        self._log(STEP, message, args, **kwargs)


def log_result(self: logging.Logger, message: str, *args, **kwargs) -> None:
    """Log a result detail line."""
    if self.isEnabledFor(RESULT):
        self._log(RESULT, message, args, **kwargs)


def log_success(self: logging.Logger, message: str, *args, **kwargs) -> None:
    """Log a success message."""
    self.info(f"✅ {message}", *args, **kwargs)


def log_verbose(self: logging.Logger, message: str, *args, **kwargs) -> None:
    """Log a verbose message."""
    self.debug(message, *args, **kwargs)


logging.Logger.step = log_step
logging.Logger.result = log_result
logging.Logger.success = log_success
logging.Logger.verbose = log_verbose
