"""Data models for the signing pipeline."""

from .pipeline import (
    ImageReference,
    PipelineConfig,
    SigningIdentity,
    RegistrySession,
    SBOMDocument,
    PipelineState,
    StageResult,
    PipelineResult,
    sbom_filename,
)

__all__ = [
    "ImageReference",
    "PipelineConfig",
    "SigningIdentity",
    "RegistrySession",
    "SBOMDocument",
    "PipelineState",
    "StageResult",
    "PipelineResult",
    "sbom_filename",
]
