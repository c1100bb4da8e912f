"""CLI for the full signing pipeline.

Equivalent to sbom.sh
"""

import argparse
import sys
from typing import Any, Optional

from ..config import load_config
from ..core.pipeline import PipelineOrchestrator
from ..core.signer import (
    IdentityProvider,
    InteractiveIdentityProvider,
    StaticTokenIdentityProvider,
    TokenFileIdentityProvider,
)
from ..errors import ConfigError
from ..models.pipeline import PipelineConfig, PipelineState
from ..utils.logging import setup_logging, LogLevel
from ..utils.subprocess import CommandRunner, check_prerequisites

REQUIRED_TOOLS = ["docker", "cosign"]


def create_run_parser(subparsers: Any) -> argparse.ArgumentParser:
    """Create the run subparser."""
    parser = subparsers.add_parser(
        "run",
        help="Sign an image, generate its SBOM and attest the SBOM",
        description="""
Log into a registry, build+push or pull an image, sign it with cosign
(keyless), generate an SPDX SBOM with docker scout and attest the SBOM
to the image.

Every option can also be given through the environment variable shown
in its help text. Command line options win over the environment.
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pull, sign and attest an existing image
  signer-py run --image-name acme/app --image-tag v1 --registry docker.io

  # Build from ./Dockerfile, push, sign and attest
  signer-py run --image-name ghcr.io/acme/app --image-tag v1 --registry ghcr.io --build

  # Same, configured from the environment (non-interactive signing in CI)
  IMAGE_NAME=acme/app IMAGE_TAG=v1 REGISTRY=docker.io \\
  BUILD_IMAGE_FROM_DOCKERFILE=false SIGSTORE_ID_TOKEN=$TOKEN signer-py run
""",
    )

    parser.add_argument(
        "--image-name",
        help="Image name, e.g. acme/app (env: IMAGE_NAME)",
    )
    parser.add_argument(
        "--image-tag",
        help="Image tag (env: IMAGE_TAG, default: latest)",
    )
    parser.add_argument(
        "--registry",
        help="Registry to log into, e.g. docker.io (env: REGISTRY)",
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--build",
        dest="build_from_source",
        action="store_const",
        const=True,
        default=None,
        help="Build from the Dockerfile and push (env: BUILD_IMAGE_FROM_DOCKERFILE=true)",
    )
    source.add_argument(
        "--pull",
        dest="build_from_source",
        action="store_const",
        const=False,
        help="Pull the existing image from the registry (default)",
    )

    parser.add_argument(
        "--build-context",
        help="Docker build context (env: BUILD_CONTEXT, default: .)",
    )
    parser.add_argument(
        "--dockerfile",
        help="Dockerfile, relative to the build context (env: DOCKERFILE, default: Dockerfile)",
    )
    parser.add_argument(
        "--sbom-dir",
        help="Directory for the SBOM file (env: SBOM_OUTPUT_DIR, default: current directory)",
    )
    parser.add_argument(
        "--identity-token",
        help="Pre-issued OIDC token for non-interactive signing (env: SIGSTORE_ID_TOKEN)",
    )
    parser.add_argument(
        "--identity-token-file",
        help="File containing an OIDC token, re-read for every signature (env: SIGSTORE_ID_TOKEN_FILE)",
    )
    parser.add_argument(
        "--summary-file",
        help="Write a JSON summary of the run to this file",
    )
    parser.add_argument(
        "--output-level",
        choices=["none", "info", "verbose"],
        default="info",
        help="Output verbosity level (default: info)",
    )

    return parser


def build_identity_provider(config: PipelineConfig) -> IdentityProvider:
    """Pick the identity provider implied by the configuration."""
    if config.identity_token:
        return StaticTokenIdentityProvider(config.identity_token)
    if config.identity_token_file:
        return TokenFileIdentityProvider(config.identity_token_file)
    return InteractiveIdentityProvider()


def run_pipeline(
    args: argparse.Namespace,
    runner: Optional[CommandRunner] = None,
) -> int:
    """
    Run the signing pipeline.

    Args:
        args: Parsed command line arguments
        runner: Command runner override (tools are assumed present when given)

    Returns:
        Exit code
    """
    level = LogLevel.from_string(args.output_level)
    setup_logging(level)

    try:
        config = load_config(vars(args))
    except ConfigError as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return 1

    if runner is None:
        missing = check_prerequisites(REQUIRED_TOOLS)
        if missing:
            print(f"❌ Missing required tools: {', '.join(missing)}", file=sys.stderr)
            return 1

    if level != LogLevel.NONE:
        image = config.image_reference
        print("━" * 66)
        print("🔐 Container Signing and SBOM Attestation")
        print("━" * 66)
        print()
        print("⚙️  Configuration:")
        print(f"   • Image: {image.full_name}")
        print(f"   • Registry: {config.registry}")
        print(f"   • Source: {'build from ' + str(config.dockerfile_path) if config.build_from_source else 'pull'}")
        print(f"   • SBOM: {config.sbom_path}")
        signing = "token" if config.identity_token or config.identity_token_file else "interactive (OIDC)"
        print(f"   • Signing identity: {signing}")
        print()

    orchestrator = PipelineOrchestrator.from_config(
        config,
        identity_provider=build_identity_provider(config),
        runner=runner,
        stream_output=level != LogLevel.NONE,
    )
    result = orchestrator.run()

    if args.summary_file:
        result.save(args.summary_file)

    if level != LogLevel.NONE:
        print()
        if result.state == PipelineState.DONE:
            print("✅ Image signed and SBOM attested")
        elif result.state == PipelineState.ATTESTATION_FAILED:
            print("⚠️  Image signed and SBOM generated, but the SBOM attestation failed")
        else:
            print(f"❌ Pipeline failed at stage: {result.failed_stage}")

    return result.exit_code
