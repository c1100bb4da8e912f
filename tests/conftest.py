"""Fixtures for tests."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from signer_py.core.signer import StaticTokenIdentityProvider
from signer_py.models.pipeline import ImageReference, PipelineConfig
from signer_py.utils.logging import ROOT_LOGGER_NAME
from signer_py.utils.subprocess import CommandResult

# We need to pass fixture names as arguments to maintain an order.
# pylint: disable=redefined-outer-name

SPDX_DOCUMENT = {
    "spdxVersion": "SPDX-2.3",
    "dataLicense": "CC0-1.0",
    "SPDXID": "SPDXRef-DOCUMENT",
    "name": "acme/app:v1",
    "packages": [
        {"SPDXID": "SPDXRef-Package-openssl", "name": "openssl", "versionInfo": "3.0.13"},
    ],
}


class FakeRunner:
    """Records commands instead of running them.

    Commands succeed unless a prefix was registered with ``fail``. A
    successful ``docker scout sbom`` writes an SPDX document to its
    ``--output`` path, as the real tool does.
    """

    def __init__(self, write_sbom: bool = True):
        self.calls: List[List[str]] = []
        self.kwargs: List[Dict] = []
        self.write_sbom = write_sbom
        self._failures: List[Tuple[Tuple[str, ...], CommandResult]] = []

    def fail(self, *prefix: str, returncode: int = 1, stderr: str = "boom") -> None:
        """Make every command starting with ``prefix`` fail."""
        self._failures.append((prefix, CommandResult(returncode=returncode, stdout="", stderr=stderr)))

    def __call__(self, cmd, **kwargs) -> CommandResult:
        cmd = list(cmd)
        self.calls.append(cmd)
        self.kwargs.append(kwargs)

        for prefix, result in self._failures:
            if tuple(cmd[: len(prefix)]) == prefix:
                return result

        if cmd[:3] == ["docker", "scout", "sbom"] and self.write_sbom:
            output = Path(cmd[cmd.index("--output") + 1])
            output.write_text(json.dumps(SPDX_DOCUMENT, indent=2))

        return CommandResult(returncode=0, stdout="", stderr="")

    def called(self, *prefix: str) -> bool:
        """Whether any recorded command starts with ``prefix``."""
        return any(tuple(cmd[: len(prefix)]) == prefix for cmd in self.calls)

    def find(self, *prefix: str) -> Optional[List[str]]:
        """First recorded command starting with ``prefix``."""
        for cmd in self.calls:
            if tuple(cmd[: len(prefix)]) == prefix:
                return cmd
        return None

    def kwargs_for(self, *prefix: str) -> Optional[Dict]:
        """Keyword arguments of the first command starting with ``prefix``."""
        for cmd, kwargs in zip(self.calls, self.kwargs):
            if tuple(cmd[: len(prefix)]) == prefix:
                return kwargs
        return None


@pytest.fixture()
def runner() -> FakeRunner:
    """Return a fresh recording command runner."""
    return FakeRunner()


@pytest.fixture()
def identity_provider() -> StaticTokenIdentityProvider:
    """Return a non-interactive identity provider."""
    return StaticTokenIdentityProvider("test-oidc-token")


@pytest.fixture()
def image() -> ImageReference:
    """Return the image used throughout the tests."""
    return ImageReference(name="acme/app", tag="v1", registry="docker.io")


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty temporary working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def make_config(workdir: Path, image: ImageReference):
    """Return a factory for pipeline configurations rooted in the working directory."""

    def _make(**overrides) -> PipelineConfig:
        settings = {
            "image_reference": image,
            "registry": "docker.io",
            "build_from_source": False,
            "build_context": str(workdir),
            "sbom_dir": str(workdir),
        }
        settings.update(overrides)
        return PipelineConfig(**settings)

    return _make


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo setup_logging so handlers never outlive a test's captured streams."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
