"""Registry session handling.

Equivalent to the ``docker login`` step of sbom.sh
"""

from typing import Optional

from ..errors import AuthError
from ..models.pipeline import ImageReference, RegistrySession
from ..utils.subprocess import CommandRunner, run_command
from ..utils.logging import get_logger

logger = get_logger(__name__)

DOCKER_HUB_ALIASES = {"docker.io", "index.docker.io", "registry-1.docker.io"}


class RegistryAuthenticator:
    """Open an authenticated session against a registry with ``docker login``."""

    def __init__(self, runner: Optional[CommandRunner] = None):
        """
        Initialize the authenticator.

        Args:
            runner: Command runner (defaults to run_command)
        """
        self.runner = runner or run_command

    @staticmethod
    def extract_registry(image: str) -> str:
        """
        Extract registry from image reference.

        Args:
            image: Image name, with or without a registry host

        Returns:
            Registry hostname
        """
        parts = image.split("/")
        if len(parts) == 1:
            return "docker.io"

        first = parts[0]
        if "." in first or ":" in first or first == "localhost":
            return first

        return "docker.io"

    @classmethod
    def same_registry(cls, first: str, second: str) -> bool:
        """Compare two registry hostnames, treating Docker Hub aliases as equal."""
        first, second = first.lower(), second.lower()
        if first in DOCKER_HUB_ALIASES and second in DOCKER_HUB_ALIASES:
            return True
        return first == second

    def authenticate(self, registry: str) -> RegistrySession:
        """
        Log into a registry. A single attempt is made.

        Docker is attached to the terminal so it can prompt for
        credentials or use a configured credential helper.

        Args:
            registry: Registry hostname

        Returns:
            RegistrySession for the registry

        Raises:
            AuthError: If the login fails
        """
        if not registry:
            raise AuthError("No registry given")

        logger.debug(f"Logging into registry: {registry}")
        result = self.runner(["docker", "login", registry], interactive=True)

        if not result.success:
            raise AuthError(
                f"Docker login failed for {registry}",
                result.error_output,
            )

        return RegistrySession(registry=registry)

    def check_image_registry(self, image: ImageReference, session: RegistrySession) -> bool:
        """
        Check that the image name points at the logged-in registry.

        A mismatch is not an error (the image may be public) but the
        later push/sign steps may fail, so it is reported.

        Returns:
            True if the image's registry matches the session
        """
        image_registry = self.extract_registry(image.name)
        if self.same_registry(image_registry, session.registry):
            return True
        logger.warning(
            f"Image {image.full_name} resolves to registry {image_registry}, "
            f"but the session is for {session.registry}"
        )
        return False
