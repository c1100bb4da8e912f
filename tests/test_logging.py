"""Tests for the logging setup."""

import logging

import pytest

from signer_py.utils.logging import LogLevel, get_logger, setup_logging


@pytest.mark.parametrize(
    ("level", "show_errors", "expected"),
    [
        pytest.param(LogLevel.NONE, True, ["[WARN] attestation skipped", "[ERROR] sign failed"], id="none"),
        pytest.param(LogLevel.NONE, False, [], id="none without errors"),
        pytest.param(
            LogLevel.INFO,
            True,
            ["[STEP] Signing", "[WARN] attestation skipped", "[ERROR] sign failed"],
            id="info",
        ),
    ],
)
def test_setup_logging_levels(
    capsys: pytest.CaptureFixture, level: LogLevel, show_errors: bool, expected: list
) -> None:
    """Warnings and errors pass every level unless explicitly suppressed."""
    setup_logging(level, use_colors=False, show_errors=show_errors)
    logger = get_logger("signer_py.core.pipeline")

    logger.debug("running cosign")
    logger.step("Signing")
    logger.warning("attestation skipped")
    logger.error("sign failed")

    assert capsys.readouterr().err.splitlines() == expected


def test_setup_logging_verbose(capsys: pytest.CaptureFixture) -> None:
    """Verbose output includes debug records."""
    setup_logging(LogLevel.VERBOSE, use_colors=False)

    get_logger("signer_py.utils.subprocess").debug("Running command: cosign sign")

    assert "[DEBUG] Running command: cosign sign" in capsys.readouterr().err
    assert logging.getLogger("signer_py").level == logging.DEBUG
