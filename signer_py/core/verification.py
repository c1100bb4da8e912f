"""Cosign signature and attestation verification.

Read-back for images produced by the signing pipeline, equivalent to the
``cosign verify-attestation`` hint printed at the end of sbom.sh
"""

from dataclasses import dataclass
from typing import List, Optional

from ..errors import ConfigError
from ..models.pipeline import ImageReference
from ..utils.subprocess import CommandRunner, run_command
from ..utils.logging import get_logger, is_verbose
from .attestation import PredicateType

logger = get_logger(__name__)


@dataclass
class VerificationResult:
    """Result of signature or attestation verification."""
    success: bool
    message: str
    output: str = ""


class CosignVerifier:
    """
    Verify image signatures and SBOM attestations using cosign.

    Supports both keyless and key-based verification modes.
    """

    DEFAULT_OIDC_ISSUER = "https://github.com/login/oauth"
    DEFAULT_REKOR_URL = "https://rekor.sigstore.dev"

    def __init__(
        self,
        certificate_oidc_issuer: str = DEFAULT_OIDC_ISSUER,
        certificate_identity: Optional[str] = None,
        certificate_identity_regexp: Optional[str] = None,
        key_file: Optional[str] = None,
        rekor_url: str = DEFAULT_REKOR_URL,
        timeout: int = 60,
        runner: Optional[CommandRunner] = None,
    ):
        """
        Initialize the verifier.

        Args:
            certificate_oidc_issuer: OIDC issuer for keyless verification
            certificate_identity: Exact signer identity (e.g. an e-mail address)
            certificate_identity_regexp: Identity regexp for keyless verification
            key_file: Path to public key file for key-based verification
            rekor_url: Rekor transparency log URL
            timeout: Timeout for verification operations
            runner: Command runner (defaults to run_command)

        Raises:
            ConfigError: If keyless mode lacks an identity, or both identity forms are given
        """
        self.keyless = key_file is None
        if self.keyless:
            if certificate_identity and certificate_identity_regexp:
                raise ConfigError(
                    "Cannot use both certificate identity and certificate identity regexp"
                )
            if not (certificate_identity or certificate_identity_regexp):
                raise ConfigError(
                    "Keyless verification needs a certificate identity or identity regexp"
                )

        self.certificate_oidc_issuer = certificate_oidc_issuer
        self.certificate_identity = certificate_identity
        self.certificate_identity_regexp = certificate_identity_regexp
        self.key_file = key_file
        self.rekor_url = rekor_url
        self.timeout = timeout
        self.runner = runner or run_command

    def _trust_args(self) -> List[str]:
        """Flags selecting what signer is trusted."""
        if not self.keyless:
            logger.debug(f"Mode: Key-based verification ({self.key_file})")
            return [f"--key={self.key_file}"]

        logger.debug(f"Mode: Keyless verification, issuer {self.certificate_oidc_issuer}")
        args = [f"--certificate-oidc-issuer={self.certificate_oidc_issuer}"]
        if self.certificate_identity:
            args.append(f"--certificate-identity={self.certificate_identity}")
        else:
            args.append(f"--certificate-identity-regexp={self.certificate_identity_regexp}")
        args.append(f"--rekor-url={self.rekor_url}")
        return args

    def verify(self, image: ImageReference) -> VerificationResult:
        """
        Verify the image signature.

        Args:
            image: Image to verify

        Returns:
            VerificationResult with verification status
        """
        args = ["cosign", "verify"] + self._trust_args() + [image.full_name]
        result = self.runner(args, timeout=self.timeout)

        if result.success:
            logger.debug("Image signature verification successful")
            return VerificationResult(
                success=True,
                message="Image is cryptographically signed and verified!",
                output=result.stdout,
            )

        error_msg = result.stderr or "Verification failed"
        if is_verbose():
            logger.error(f"Image signature verification failed: {error_msg}")
        return VerificationResult(success=False, message=error_msg)

    def verify_attestation(
        self,
        image: ImageReference,
        predicate_type: PredicateType = PredicateType.SPDX_JSON,
    ) -> VerificationResult:
        """
        Verify that a signed SBOM attestation is attached to the image.

        Args:
            image: Image to verify
            predicate_type: Expected predicate type

        Returns:
            VerificationResult with verification status
        """
        args = ["cosign", "verify-attestation", "--type", predicate_type.value]
        args.extend(self._trust_args())
        args.append(image.full_name)

        result = self.runner(args, timeout=self.timeout)

        if result.success:
            logger.debug("SBOM attestation verification successful")
            return VerificationResult(
                success=True,
                message=f"SBOM attestation ({predicate_type.value}) verified!",
                output=result.stdout,
            )

        error_msg = result.stderr or "Attestation verification failed"
        if is_verbose():
            logger.error(f"SBOM attestation verification failed: {error_msg}")
        return VerificationResult(success=False, message=error_msg)
