"""SBOM generation with docker scout.

Equivalent to the "Generate SBOM Locally" step of sbom.sh
"""

import hashlib
from pathlib import Path
from typing import Optional

from ..errors import SBOMError
from ..models.pipeline import ImageReference, SBOMDocument
from ..utils.subprocess import CommandRunner, run_command
from ..utils.logging import get_logger

logger = get_logger(__name__)


def file_sha256(path: Path) -> str:
    """Hex SHA-256 of a file's contents."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


class SBOMGenerator:
    """Write an SPDX SBOM for an image to local storage."""

    SBOM_FORMAT = "spdx"

    def __init__(
        self,
        output_dir: str = ".",
        runner: Optional[CommandRunner] = None,
    ):
        """
        Initialize the generator.

        Args:
            output_dir: Directory the SBOM file is written to
            runner: Command runner (defaults to run_command)
        """
        self.output_dir = Path(output_dir)
        self.runner = runner or run_command

    def output_path(self, image: ImageReference) -> Path:
        """Deterministic SBOM path for an image."""
        return self.output_dir / image.sbom_filename

    def generate(self, image: ImageReference) -> SBOMDocument:
        """
        Generate the SBOM for an image.

        Args:
            image: Image to inspect

        Returns:
            SBOMDocument pointing at the written file

        Raises:
            SBOMError: If docker scout fails, leaves no output file, or the
                output directory or file cannot be used
        """
        output = self.output_path(image)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SBOMError(f"Cannot use SBOM output directory {self.output_dir}", str(e)) from e

        args = [
            "docker", "scout", "sbom", image.full_name,
            "--format", self.SBOM_FORMAT,
            "--output", str(output),
        ]
        result = self.runner(args)

        if not result.success:
            raise SBOMError(
                f"Failed to generate SBOM for {image.full_name} using docker scout; "
                "check the docker scout installation and connectivity",
                result.error_output,
            )
        if not output.is_file():
            raise SBOMError(f"docker scout reported success but {output} was not written")

        try:
            sha256 = file_sha256(output)
        except OSError as e:
            raise SBOMError(f"Cannot read SBOM file {output}", str(e)) from e
        logger.debug(f"SBOM sha256: {sha256}")

        return SBOMDocument(path=output, image_reference=image, sha256=sha256)
