"""CLI for verifying a signed image and its SBOM attestation."""

import argparse
import os
import sys
from typing import Any, Optional

from ..config import DEFAULT_IMAGE_TAG, ENV_IMAGE_NAME, ENV_IMAGE_TAG
from ..core.attestation import PredicateType
from ..core.verification import CosignVerifier
from ..errors import ConfigError
from ..models.pipeline import ImageReference
from ..utils.logging import setup_logging, LogLevel
from ..utils.subprocess import CommandRunner, check_prerequisites


def create_verify_parser(subparsers: Any) -> argparse.ArgumentParser:
    """Create the verify subparser."""
    parser = subparsers.add_parser(
        "verify",
        help="Verify an image signature and, optionally, its SBOM attestation",
        description="""
Verify a container image signature with cosign, and optionally the SBOM
attestation attached by 'signer-py run'.

Keyless verification needs the identity that signed the image (the
e-mail address or workflow URI from the OIDC login) and its issuer.
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Verify signature and SBOM attestation of an interactively signed image
  signer-py verify --image-name acme/app --image-tag v1 \\
    --certificate-identity dev@acme.example --attestation

  # Verify an image signed from GitHub Actions
  signer-py verify --image-name ghcr.io/acme/app --image-tag v1 \\
    --certificate-oidc-issuer https://token.actions.githubusercontent.com \\
    --certificate-identity-regexp "https://github.com/acme/.*"

  # Verify with public key
  signer-py verify --image-name acme/app --key cosign.pub
""",
    )

    parser.add_argument(
        "--image-name",
        help="Image name (env: IMAGE_NAME)",
    )
    parser.add_argument(
        "--image-tag",
        help="Image tag (env: IMAGE_TAG, default: latest)",
    )
    parser.add_argument(
        "--certificate-oidc-issuer",
        default=CosignVerifier.DEFAULT_OIDC_ISSUER,
        help=f"OIDC issuer for keyless verification (default: {CosignVerifier.DEFAULT_OIDC_ISSUER})",
    )
    parser.add_argument(
        "--certificate-identity",
        help="Exact certificate identity for keyless verification",
    )
    parser.add_argument(
        "--certificate-identity-regexp",
        help="Identity regexp for keyless verification",
    )
    parser.add_argument(
        "--key",
        dest="key_file",
        help="Path to public key file for key-based verification",
    )
    parser.add_argument(
        "--rekor-url",
        default=CosignVerifier.DEFAULT_REKOR_URL,
        help=f"Rekor transparency log URL (default: {CosignVerifier.DEFAULT_REKOR_URL})",
    )
    parser.add_argument(
        "--attestation",
        action="store_true",
        help="Also verify the SBOM attestation",
    )
    parser.add_argument(
        "--type",
        dest="predicate_type",
        choices=[t.value for t in PredicateType],
        default=PredicateType.SPDX_JSON.value,
        help="Attestation predicate type (default: spdxjson)",
    )
    parser.add_argument(
        "--output-level",
        choices=["none", "info", "verbose"],
        default="info",
        help="Output verbosity level (default: info)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=60,
        help="Timeout in seconds (default: 60)",
    )

    return parser


def run_verify(
    args: argparse.Namespace,
    runner: Optional[CommandRunner] = None,
    env: Optional[dict] = None,
) -> int:
    """
    Run image verification.

    Args:
        args: Parsed command line arguments
        runner: Command runner override (tools are assumed present when given)
        env: Environment mapping used for IMAGE_NAME/IMAGE_TAG fallbacks

    Returns:
        Exit code
    """
    env = os.environ if env is None else env
    level = LogLevel.from_string(args.output_level)
    setup_logging(level)

    try:
        image = ImageReference(
            name=args.image_name or env.get(ENV_IMAGE_NAME, ""),
            tag=args.image_tag or env.get(ENV_IMAGE_TAG) or DEFAULT_IMAGE_TAG,
        )
        verifier = CosignVerifier(
            certificate_oidc_issuer=args.certificate_oidc_issuer,
            certificate_identity=args.certificate_identity,
            certificate_identity_regexp=args.certificate_identity_regexp,
            key_file=args.key_file,
            rekor_url=args.rekor_url,
            timeout=args.timeout,
            runner=runner,
        )
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if runner is None:
        missing = check_prerequisites(["cosign"])
        if missing:
            print(f"❌ Missing required tools: {', '.join(missing)}", file=sys.stderr)
            return 1

    quiet = level == LogLevel.NONE
    if not quiet:
        print("🔐 Image Signature Verification")
        print()
        print("⚙️  Configuration:")
        print(f"   • Image: {image.full_name}")
        print(f"   • Mode: {'Key-based' if args.key_file else 'Keyless (OIDC)'}")
        if args.attestation:
            print(f"   • Attestation: {args.predicate_type}")
        print()

    results = [("Signature", verifier.verify(image))]
    if args.attestation:
        results.append((
            "SBOM attestation",
            verifier.verify_attestation(image, PredicateType(args.predicate_type)),
        ))

    failed = [label for label, result in results if not result.success]

    if not quiet:
        for label, result in results:
            icon = "✅" if result.success else "❌"
            print(f"{icon} {label}: {'verified' if result.success else 'FAILED'}")
            if not result.success and level == LogLevel.VERBOSE:
                print(f"   📋 Error: {result.message}")
        if failed:
            print()
            print("💡 Possible reasons:")
            print("   • Image is not signed, or the SBOM was never attested")
            print("   • Wrong certificate identity or issuer")
            print("   • Network issues accessing transparency log")

    return 1 if failed else 0
