"""Data models for a signing pipeline run."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional, Dict, Any
import json
import re

from ..errors import ConfigError

SBOM_SUFFIX = "_sbom.spdx.json"

_SEPARATORS = re.compile(r"[:/]")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ImageReference:
    """A container image identified by name and tag.

    ``registry`` is where the session is opened; it is not part of
    ``full_name``.
    """
    name: str
    tag: str
    registry: str = ""

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ConfigError("Image name must not be empty")
        if not self.tag or not self.tag.strip():
            raise ConfigError("Image tag must not be empty")

    @property
    def full_name(self) -> str:
        """The ``name:tag`` reference handed to docker and cosign."""
        return f"{self.name}:{self.tag}"

    @property
    def sbom_filename(self) -> str:
        """Deterministic local filename for this image's SBOM."""
        return sbom_filename(self)

    def __str__(self) -> str:
        return self.full_name


def sbom_filename(image: ImageReference) -> str:
    """
    Build the SBOM filename for an image.

    Every ``:`` and ``/`` in ``name:tag`` is replaced by ``_``, so
    ``acme/app:v1`` becomes ``acme_app_v1_sbom.spdx.json``.
    """
    return _SEPARATORS.sub("_", image.full_name) + SBOM_SUFFIX


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for one pipeline run."""
    image_reference: ImageReference
    registry: str
    build_from_source: bool = False
    build_context: str = "."
    dockerfile: str = "Dockerfile"
    sbom_dir: str = "."
    identity_token: Optional[str] = field(default=None, repr=False)
    identity_token_file: Optional[str] = None

    @property
    def dockerfile_path(self) -> Path:
        """Dockerfile location, resolved against the build context."""
        path = Path(self.dockerfile)
        if path.is_absolute():
            return path
        return Path(self.build_context) / path

    @property
    def sbom_path(self) -> Path:
        """Where the SBOM for this run is written."""
        return Path(self.sbom_dir) / self.image_reference.sbom_filename


@dataclass(frozen=True)
class SigningIdentity:
    """Short-lived identity used for exactly one cosign operation.

    A ``None`` token lets cosign run its own interactive OIDC flow.
    """
    token: Optional[str] = field(default=None, repr=False)

    @property
    def interactive(self) -> bool:
        """Whether cosign must obtain the identity through the browser."""
        return self.token is None


@dataclass(frozen=True)
class RegistrySession:
    """Handle for an authenticated registry login."""
    registry: str
    authenticated_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class SBOMDocument:
    """An SPDX document written to local storage."""
    path: Path
    image_reference: ImageReference
    sha256: str


class PipelineState(Enum):
    """States of the signing pipeline."""
    START = "start"
    AUTHENTICATED = "authenticated"
    PROVISIONED = "provisioned"
    SIGNED = "signed"
    SBOM_GENERATED = "sbom-generated"
    ATTESTED = "attested"
    ATTESTATION_FAILED = "attestation-failed"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_success(self) -> bool:
        """Whether this terminal state counts as a successful run."""
        return self in (PipelineState.DONE, PipelineState.ATTESTATION_FAILED)


@dataclass
class StageResult:
    """Outcome of a single stage."""
    stage: str
    success: bool
    message: str = ""
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "stage": self.stage,
            "success": self.success,
            "message": self.message,
            "error": self.error,
        }


@dataclass
class PipelineResult:
    """Summary of a complete pipeline run."""
    image: str
    registry: str
    state: PipelineState = PipelineState.START
    stages: List[StageResult] = field(default_factory=list)
    sbom_file: Optional[str] = None
    sbom_sha256: Optional[str] = None
    attested: bool = False
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def success(self) -> bool:
        """Whether the run ended in a terminal-success state."""
        return self.state.is_success

    @property
    def exit_code(self) -> int:
        """Process exit status for this run."""
        return 0 if self.success else 1

    @property
    def failed_stage(self) -> Optional[str]:
        """Name of the stage that halted the run, if any."""
        for stage in self.stages:
            if not stage.success and self.state == PipelineState.FAILED:
                return stage.stage
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "pipeline_summary": {
                "timestamp": self.timestamp.isoformat(),
                "image": self.image,
                "registry": self.registry,
                "state": self.state.value,
                "exit_code": self.exit_code,
                "attested": self.attested,
                "sbom_file": self.sbom_file,
                "sbom_sha256": self.sbom_sha256,
            },
            "stages": [stage.to_dict() for stage in self.stages],
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, filepath: str) -> None:
        """Save summary to file."""
        with open(filepath, "w") as f:
            f.write(self.to_json())
