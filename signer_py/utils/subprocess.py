"""Subprocess utilities for invoking docker and cosign."""

import subprocess
import shutil
from dataclasses import dataclass
from typing import Callable, Optional, List, Union
from .logging import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Result of a command execution."""
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        """Check if command was successful."""
        return self.returncode == 0 and not self.timed_out

    @property
    def error_output(self) -> str:
        """Best available description of a failure."""
        text = (self.stderr or self.stdout or "").strip()
        if text:
            return text
        return f"exit status {self.returncode}"


# Signature shared by run_command and the fakes used in tests
CommandRunner = Callable[..., CommandResult]


def run_command(
    cmd: Union[str, List[str]],
    timeout: Optional[int] = None,
    capture_output: bool = True,
    interactive: bool = False,
) -> CommandResult:
    """
    Run a command and report its outcome without raising.

    Interactive commands inherit the terminal so the user can answer
    credential prompts or follow an OIDC browser redirect; their output is
    never captured.

    Args:
        cmd: Command to run (string or list of arguments)
        timeout: Timeout in seconds (None for no timeout)
        capture_output: Whether to capture stdout/stderr
        interactive: Attach the command to the current terminal

    Returns:
        CommandResult with stdout, stderr, and return code
    """
    if isinstance(cmd, str):
        cmd = cmd.split()
    if interactive:
        capture_output = False

    logger.debug(f"Running command: {_redact(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=capture_output,
            text=True,
            timeout=timeout,
        )
        return CommandResult(
            returncode=result.returncode,
            stdout=result.stdout if capture_output else "",
            stderr=result.stderr if capture_output else "",
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"Command timed out after {timeout}s: {cmd[0]}")
        return CommandResult(
            returncode=-1,
            stdout="",
            stderr=f"Command timed out after {timeout} seconds",
            timed_out=True,
        )
    except FileNotFoundError as e:
        logger.debug(f"Command not found: {cmd[0]}")
        return CommandResult(
            returncode=127,
            stdout="",
            stderr=str(e),
        )


def _redact(cmd: List[str]) -> List[str]:
    """Hide identity tokens from debug output."""
    redacted = []
    for arg in cmd:
        if arg.startswith("--identity-token="):
            redacted.append("--identity-token=***")
        else:
            redacted.append(arg)
    return redacted


def check_tool_available(tool: str) -> bool:
    """
    Check if a tool is available in PATH.

    Args:
        tool: Tool name to check

    Returns:
        True if tool is available
    """
    return shutil.which(tool) is not None


def check_prerequisites(tools: List[str]) -> List[str]:
    """
    Check if required tools are available.

    Args:
        tools: List of tool names to check

    Returns:
        List of missing tools
    """
    return [tool for tool in tools if not check_tool_available(tool)]
