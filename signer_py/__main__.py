"""
Main entry point for the signer package.

Usage:
    python -m signer_py run [OPTIONS]
    python -m signer_py verify [OPTIONS]
"""

import sys


def main() -> int:
    """Main entry point."""
    from .cli import main as cli_main
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
