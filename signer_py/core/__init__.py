"""Core functionality for the signer package."""

from .registry import RegistryAuthenticator
from .provisioner import ImageProvisioner
from .signer import (
    CosignSigner,
    IdentityProvider,
    InteractiveIdentityProvider,
    StaticTokenIdentityProvider,
    TokenFileIdentityProvider,
)
from .sbom import SBOMGenerator
from .attestation import CosignAttestor, PredicateType
from .verification import CosignVerifier, VerificationResult
from .pipeline import PipelineOrchestrator

__all__ = [
    "RegistryAuthenticator",
    "ImageProvisioner",
    "CosignSigner",
    "IdentityProvider",
    "InteractiveIdentityProvider",
    "StaticTokenIdentityProvider",
    "TokenFileIdentityProvider",
    "SBOMGenerator",
    "CosignAttestor",
    "PredicateType",
    "CosignVerifier",
    "VerificationResult",
    "PipelineOrchestrator",
]
