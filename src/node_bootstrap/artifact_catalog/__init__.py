"""Artifact catalog exports."""

from .artifact_models import ArtifactRole, ArtifactSpec
from .catalog import (
    ARCHITECTURE_ALIASES,
    UnsupportedArchitectureError,
    artifact_filename,
    normalize_architecture,
    select_artifacts,
)

__all__ = [
    "ArtifactRole",
    "ArtifactSpec",
    "ARCHITECTURE_ALIASES",
    "UnsupportedArchitectureError",
    "artifact_filename",
    "normalize_architecture",
    "select_artifacts",
]
