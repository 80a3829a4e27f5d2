"""Artifact delivery domain entities."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from node_bootstrap.artifact_catalog.artifact_models import ArtifactRole


@dataclass(frozen=True)
class InstalledArtifact:
    """A fully written artifact at its final run path."""

    name: ArtifactRole
    path: Path
    executable: bool = False

    def as_executable(self) -> InstalledArtifact:
        return replace(self, executable=True)
