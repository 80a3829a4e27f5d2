"""Architecture-aware artifact selection."""

from __future__ import annotations

from collections.abc import Mapping

from node_bootstrap.configuration.runtime_settings import MonitoringMode, RuntimeConfig

from .artifact_models import ArtifactRole, ArtifactSpec

ARCHITECTURE_ALIASES: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "arm": "arm64",
}

# Role -> (remote object name under the architecture source, local filename).
_ARTIFACT_LAYOUT: dict[ArtifactRole, tuple[str, str]] = {
    ArtifactRole.MONITOR_AGENT: ("agent", "npm"),
    ArtifactRole.MONITOR_LEGACY: ("v1", "php"),
    ArtifactRole.PROXY_CORE: ("web", "web"),
    ArtifactRole.RELAY: ("2go", "bot"),
}


class UnsupportedArchitectureError(Exception):
    """Raised when no artifacts are published for the host architecture."""


def normalize_architecture(architecture: str) -> str:
    """Map a raw machine identifier onto a published architecture family."""
    family = ARCHITECTURE_ALIASES.get(architecture.strip().lower())
    if family is None:
        supported = ", ".join(sorted(ARCHITECTURE_ALIASES))
        raise UnsupportedArchitectureError(
            f"Unsupported architecture '{architecture}'. Supported: {supported}."
        )
    return family


def select_artifacts(config: RuntimeConfig) -> tuple[ArtifactSpec, ...]:
    """Return the ordered artifacts this node needs; monitoring, when enabled, comes first."""
    family = normalize_architecture(config.architecture)
    base_url = _source_for(family, config.artifact_sources)

    roles = [ArtifactRole.PROXY_CORE, ArtifactRole.RELAY]
    mode = config.monitoring.mode
    if mode is MonitoringMode.AGENT:
        roles.insert(0, ArtifactRole.MONITOR_AGENT)
    elif mode is MonitoringMode.LEGACY:
        roles.insert(0, ArtifactRole.MONITOR_LEGACY)

    return tuple(_build_spec(role, base_url) for role in roles)


def artifact_filename(role: ArtifactRole) -> str:
    return _ARTIFACT_LAYOUT[role][1]


def _source_for(family: str, sources: Mapping[str, str]) -> str:
    base_url = sources.get(family)
    if not base_url:
        raise UnsupportedArchitectureError(f"No artifact source configured for '{family}'.")
    return base_url.rstrip("/")


def _build_spec(role: ArtifactRole, base_url: str) -> ArtifactSpec:
    remote_name, filename = _ARTIFACT_LAYOUT[role]
    return ArtifactSpec(name=role, url=f"{base_url}/{remote_name}", filename=filename)
