"""CLI entry points for the signing pipeline."""

import sys
import argparse
from typing import List, Optional

from .run_pipeline import create_run_parser, run_pipeline
from .verify_image import create_verify_parser, run_verify


def create_main_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="signer-py",
        description="Container image signing and SBOM attestation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  run       Log in, provision, sign, generate the SBOM and attest it
  verify    Verify an image signature and its SBOM attestation

Exit status of 'run':
  0  every stage succeeded, or only the SBOM attestation failed
  1  login, build/push/pull, signing or SBOM generation failed

Examples:
  # Sign an image pulled from Docker Hub and attest its SBOM
  signer-py run --image-name acme/app --image-tag v1 --registry docker.io

  # Verify the result
  signer-py verify --image-name acme/app --image-tag v1 \\
    --certificate-identity dev@acme.example --attestation
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    create_run_parser(subparsers)
    create_verify_parser(subparsers)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_main_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    command_handlers = {
        "run": run_pipeline,
        "verify": run_verify,
    }

    handler = command_handlers.get(args.command)
    if handler:
        try:
            return handler(args)
        except KeyboardInterrupt:
            print("\n\nOperation cancelled by user", file=sys.stderr)
            return 130
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 1


__all__ = ["main", "create_main_parser"]
