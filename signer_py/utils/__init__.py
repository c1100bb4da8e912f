"""Utility modules for the signer package."""

from .logging import (
    get_logger,
    setup_logging,
    LogLevel,
    is_verbose,
)
from .subprocess import run_command, CommandResult, CommandRunner, check_prerequisites

__all__ = [
    "get_logger",
    "setup_logging",
    "LogLevel",
    "is_verbose",
    "run_command",
    "CommandResult",
    "CommandRunner",
    "check_prerequisites",
]
