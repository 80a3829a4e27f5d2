"""Artifact catalog domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ArtifactRole(str, Enum):
    """Logical artifact names; each appears at most once per run."""

    MONITOR_AGENT = "monitor-agent"
    MONITOR_LEGACY = "monitor-legacy"
    PROXY_CORE = "proxy-core"
    RELAY = "relay"


@dataclass(frozen=True)
class ArtifactSpec:
    """One downloadable binary and where it lands under the file root."""

    name: ArtifactRole
    url: str
    filename: str
