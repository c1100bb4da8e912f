"""Keyless image signing with cosign.

Equivalent to the "Sign the Docker Image with Cosign" step of sbom.sh
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..errors import SignError
from ..models.pipeline import ImageReference, RegistrySession, SigningIdentity
from ..utils.subprocess import CommandRunner, run_command
from ..utils.logging import get_logger

logger = get_logger(__name__)


class IdentityProvider(ABC):
    """Source of short-lived signing identities.

    Called once per cosign operation; identities are never cached.
    """

    @abstractmethod
    def obtain_signing_identity(self) -> SigningIdentity:
        """Return a fresh identity for a single signing operation."""


class InteractiveIdentityProvider(IdentityProvider):
    """Leave identity acquisition to cosign's browser-based OIDC flow."""

    def obtain_signing_identity(self) -> SigningIdentity:
        logger.info(
            "You will be redirected to your browser to authenticate with your "
            "OIDC provider (e.g. Google, GitHub)."
        )
        return SigningIdentity()


class StaticTokenIdentityProvider(IdentityProvider):
    """Hand out a pre-issued OIDC token, e.g. one minted by CI."""

    def __init__(self, token: str):
        if not token:
            raise ValueError("token must not be empty")
        self._token = token

    def obtain_signing_identity(self) -> SigningIdentity:
        return SigningIdentity(token=self._token)


class TokenFileIdentityProvider(IdentityProvider):
    """Read an OIDC token from a file each time one is needed.

    Projected workload tokens are rotated on disk, so the file is re-read
    for every operation.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def obtain_signing_identity(self) -> SigningIdentity:
        try:
            token = self.path.read_text().strip()
        except OSError as e:
            raise SignError(f"Cannot read identity token file {self.path}", str(e)) from e
        if not token:
            raise SignError(f"Identity token file {self.path} is empty")
        return SigningIdentity(token=token)


def identity_args(identity: SigningIdentity) -> List[str]:
    """Cosign flags that carry a non-interactive identity."""
    if identity.interactive:
        return []
    return [f"--identity-token={identity.token}"]


class CosignSigner:
    """
    Sign container images with cosign in keyless mode.

    The signature is recorded in the registry and the transparency log by
    cosign itself; only cosign's exit status is checked.
    """

    def __init__(
        self,
        identity_provider: Optional[IdentityProvider] = None,
        runner: Optional[CommandRunner] = None,
    ):
        """
        Initialize the signer.

        Args:
            identity_provider: Where signing identities come from
            runner: Command runner (defaults to run_command)
        """
        self.identity_provider = identity_provider or InteractiveIdentityProvider()
        self.runner = runner or run_command

    def sign(self, image: ImageReference, session: Optional[RegistrySession] = None) -> None:
        """
        Sign an image.

        Args:
            image: Image to sign
            session: Registry session the signature is pushed through

        Raises:
            SignError: If no identity could be obtained or cosign fails
        """
        if session is not None:
            logger.debug(f"Signature will be stored in {session.registry}")

        identity = self.identity_provider.obtain_signing_identity()

        args = ["cosign", "sign", "--yes"]
        args.extend(identity_args(identity))
        args.append(image.full_name)

        result = self.runner(args, interactive=identity.interactive)
        if not result.success:
            raise SignError(
                f"Failed to sign image {image.full_name} with cosign",
                result.error_output,
            )
