"""Artifact delivery exports."""

from .artifact_fetcher import ArtifactFetcher, DownloadError
from .artifact_installer import EXECUTABLE_MODE, ArtifactPermissionError, install_artifacts
from .delivery_outcomes import InstalledArtifact

__all__ = [
    "ArtifactFetcher",
    "DownloadError",
    "ArtifactPermissionError",
    "EXECUTABLE_MODE",
    "InstalledArtifact",
    "install_artifacts",
]
