"""SBOM attestation with cosign.

Equivalent to the "Attesting the SBOM File with the Image" step of sbom.sh
"""

from enum import Enum
from typing import Optional

from ..errors import AttestError, SignError
from ..models.pipeline import ImageReference, RegistrySession, SBOMDocument
from ..utils.subprocess import CommandRunner, run_command
from ..utils.logging import get_logger
from .signer import IdentityProvider, InteractiveIdentityProvider, identity_args

logger = get_logger(__name__)


class PredicateType(Enum):
    """Cosign ``--type`` values for SBOM predicates."""
    SPDX_JSON = "spdxjson"
    CYCLONEDX = "cyclonedx"
    CUSTOM = "custom"


# Predicate type URIs cosign writes into the in-toto statement
PREDICATE_TYPE_MAP = {
    PredicateType.SPDX_JSON: "https://spdx.dev/Document",
    PredicateType.CYCLONEDX: "https://cyclonedx.org/bom",
    PredicateType.CUSTOM: "https://cosign.sigstore.dev/attestation/v1",
}


class CosignAttestor:
    """
    Attach a signed SBOM attestation to an image.

    Each attestation obtains its own identity; the one used for signing
    the image is not reused.
    """

    def __init__(
        self,
        identity_provider: Optional[IdentityProvider] = None,
        runner: Optional[CommandRunner] = None,
        predicate_type: PredicateType = PredicateType.SPDX_JSON,
    ):
        """
        Initialize the attestor.

        Args:
            identity_provider: Where signing identities come from
            runner: Command runner (defaults to run_command)
            predicate_type: Predicate type of the attested document
        """
        self.identity_provider = identity_provider or InteractiveIdentityProvider()
        self.runner = runner or run_command
        self.predicate_type = predicate_type

    def attest(
        self,
        sbom: SBOMDocument,
        image: ImageReference,
        session: Optional[RegistrySession] = None,
    ) -> None:
        """
        Sign the SBOM and publish it as an attestation of the image.

        Args:
            sbom: Generated SBOM document
            image: Image the SBOM describes
            session: Registry session the attestation is pushed through

        Raises:
            AttestError: If no identity could be obtained or cosign fails
        """
        if not sbom.path.is_file():
            raise AttestError(f"SBOM file {sbom.path} no longer exists")
        if session is not None:
            logger.debug(f"Attestation will be stored in {session.registry}")

        try:
            identity = self.identity_provider.obtain_signing_identity()
        except SignError as e:
            raise AttestError("Could not obtain a signing identity for the attestation", str(e)) from e

        args = [
            "cosign", "attest",
            "--predicate", str(sbom.path),
            "--type", self.predicate_type.value,
            "--yes",
        ]
        args.extend(identity_args(identity))
        args.append(image.full_name)

        logger.debug(f"Attesting SBOM sha256:{sbom.sha256} ({PREDICATE_TYPE_MAP[self.predicate_type]})")
        result = self.runner(args, interactive=identity.interactive)

        if not result.success:
            raise AttestError(
                f"Failed to attest SBOM {sbom.path.name} to image {image.full_name}",
                result.error_output,
            )
