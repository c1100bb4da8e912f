"""Image provisioning: build and push, or pull.

Equivalent to the "Prepare the Docker Image" step of sbom.sh
"""

from typing import List, Optional

from ..errors import (
    BuildFailureError,
    MissingBuildContextError,
    PullFailureError,
    PushFailureError,
)
from ..models.pipeline import ImageReference, PipelineConfig, RegistrySession
from ..utils.subprocess import CommandRunner, run_command
from ..utils.logging import get_logger

logger = get_logger(__name__)


class ImageProvisioner:
    """
    Make the configured image available locally and in the registry.

    The build-or-pull decision is taken once from the configuration; both
    paths return the same ImageReference so later stages do not care which
    one ran.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        stream_output: bool = True,
    ):
        """
        Initialize the provisioner.

        Args:
            runner: Command runner (defaults to run_command)
            stream_output: Show docker's progress output instead of capturing it
        """
        self.runner = runner or run_command
        self.stream_output = stream_output

    def provision(
        self,
        config: PipelineConfig,
        session: Optional[RegistrySession] = None,
    ) -> ImageReference:
        """
        Build and push, or pull, the configured image.

        Args:
            config: Pipeline configuration
            session: Registry session used for push/pull

        Returns:
            The provisioned ImageReference

        Raises:
            ProvisionError: One of its subclasses on failure
        """
        image = config.image_reference
        if session is not None:
            logger.debug(f"Using registry session for {session.registry}")

        if config.build_from_source:
            logger.info("Building image from Dockerfile and pushing to registry...")
            self.build_and_push(config)
        else:
            logger.info("Pulling existing image from registry...")
            self.pull(image)

        return image

    def build_and_push(self, config: PipelineConfig) -> None:
        """
        Build the image from its Dockerfile, then push it.

        The Dockerfile is checked before docker is invoked; a failed build
        is never pushed.
        """
        image = config.image_reference
        dockerfile = config.dockerfile_path

        if not dockerfile.is_file():
            raise MissingBuildContextError(
                "Dockerfile not found, cannot build image",
                str(dockerfile),
            )

        build_args: List[str] = [
            "docker", "build",
            "-t", image.full_name,
            "-f", str(dockerfile),
            config.build_context,
        ]
        result = self._run(build_args)
        if not result.success:
            raise BuildFailureError(f"Failed to build image {image.full_name}", result.error_output)
        logger.debug(f"Built {image.full_name}")

        result = self._run(["docker", "push", image.full_name])
        if not result.success:
            raise PushFailureError(f"Failed to push image {image.full_name}", result.error_output)
        logger.debug(f"Pushed {image.full_name}")

    def pull(self, image: ImageReference) -> None:
        """Pull the image from the registry."""
        result = self._run(["docker", "pull", image.full_name])
        if not result.success:
            raise PullFailureError(
                f"Failed to pull image {image.full_name}; check the image name/tag and registry access",
                result.error_output,
            )
        logger.debug(f"Pulled {image.full_name}")

    def _run(self, args: List[str]):
        return self.runner(args, capture_output=not self.stream_output)
