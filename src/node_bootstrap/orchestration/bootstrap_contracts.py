"""Orchestration entities."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum

from node_bootstrap.artifact_delivery.delivery_outcomes import InstalledArtifact
from node_bootstrap.process_launch.daemon_models import DaemonHandle
from node_bootstrap.tunnel_discovery.tunnel_models import DiscoveryResult, TunnelHandle


class BootstrapPhase(str, Enum):
    """Sequential startup phases, named as they are reported on failure."""

    ARTIFACT_SELECTION = "artifact selection"
    WORKSPACE = "workspace preparation"
    DAEMON_CONFIGURATION = "daemon configuration"
    DOWNLOAD = "artifact download"
    INSTALL = "artifact installation"
    PROXY_CORE = "proxy core startup"
    TUNNEL = "tunnel startup"


class BootstrapError(Exception):
    """Raised when a fatal phase fails; the node is not serving."""

    def __init__(self, phase: BootstrapPhase, cause: BaseException) -> None:
        super().__init__(f"Bootstrap failed during {phase.value}: {cause}")
        self.phase = phase
        self.cause = cause


@dataclass(frozen=True)
class BootstrapOutcome:
    """Everything the subscription server needs once startup succeeded."""

    artifacts: tuple[InstalledArtifact, ...]
    daemons: tuple[DaemonHandle, ...]
    tunnel: TunnelHandle
    discovery: Future[DiscoveryResult]

    def daemon(self, name: str) -> DaemonHandle:
        for handle in self.daemons:
            if handle.name == name:
                return handle
        raise KeyError(name)
