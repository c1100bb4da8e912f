"""Error classes for the signing pipeline."""

from typing import Optional


class SignerError(Exception):
    """The base class for signer_py errors."""


class ConfigError(SignerError):
    """Happens when the pipeline configuration is missing or invalid."""


class PipelineStateError(SignerError):
    """Happens when the orchestrator is asked to make an illegal state transition."""


class StageError(SignerError):
    """Base class for failures of a single pipeline stage.

    ``fatal`` decides whether the orchestrator halts the run on this error.
    """

    stage = "pipeline"
    fatal = True

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class AuthError(StageError):
    """Happens when logging into the registry fails."""

    stage = "authenticate"


class ProvisionError(StageError):
    """Happens when the image can be neither built and pushed nor pulled."""

    stage = "provision"


class MissingBuildContextError(ProvisionError):
    """Happens when a build is requested but no Dockerfile exists in the build context."""


class BuildFailureError(ProvisionError):
    """Happens when ``docker build`` fails."""


class PushFailureError(ProvisionError):
    """Happens when pushing a freshly built image fails."""


class PullFailureError(ProvisionError):
    """Happens when pulling the image from the registry fails."""


class SignError(StageError):
    """Happens when the image cannot be signed."""

    stage = "sign"


class SBOMError(StageError):
    """Happens when the SBOM cannot be generated."""

    stage = "sbom"


class AttestError(StageError):
    """Happens when the SBOM cannot be attested to the image.

    The SBOM file is still valid locally, so this is not fatal to the run.
    """

    stage = "attest"
    fatal = False
