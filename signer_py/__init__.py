"""
Container image signing and SBOM attestation pipeline.

Provides functionality for:
- Registry login and image build/push or pull
- Keyless image signing with cosign
- SPDX SBOM generation with docker scout
- SBOM attestation and verification with cosign
"""

__version__ = "1.0.0"

from .core.pipeline import PipelineOrchestrator
from .core.signer import CosignSigner, IdentityProvider
from .core.attestation import CosignAttestor
from .core.verification import CosignVerifier
from .config import load_config

__all__ = [
    "PipelineOrchestrator",
    "CosignSigner",
    "IdentityProvider",
    "CosignAttestor",
    "CosignVerifier",
    "load_config",
]
