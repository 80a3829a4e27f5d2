"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class MonitoringMode(str, Enum):
    """Monitoring agent flavour, selected by the presence of a server port."""

    AGENT = "agent"
    LEGACY = "legacy"


@dataclass(frozen=True)
class NodeSettings:
    """Identity of the node as seen by clients."""

    uuid: str
    name: str


@dataclass(frozen=True)
class ProxySettings:
    """Proxy core listener and the edge address clients dial."""

    listen_port: int
    edge_address: str
    edge_port: int


@dataclass(frozen=True)
class MonitoringSettings:
    """Remote monitoring agent connectivity."""

    server: str | None
    port: int | None
    key: str | None

    @property
    def enabled(self) -> bool:
        return bool(self.server and self.key)

    @property
    def mode(self) -> MonitoringMode | None:
        if not self.enabled:
            return None
        return MonitoringMode.AGENT if self.port else MonitoringMode.LEGACY


@dataclass(frozen=True)
class TunnelSettings:
    """Tunnel credential and hostname discovery settings."""

    token: str | None
    domain: str | None
    fallback_hostname: str
    discovery_timeout_seconds: float

    @property
    def fixed_hostname(self) -> str | None:
        """Hostname known in advance, which makes output scanning unnecessary."""
        if self.token and self.domain:
            return self.domain
        return None


@dataclass(frozen=True)
class SubscriptionSettings:
    """Subscription route settings."""

    path: str
    encode_base64: bool


@dataclass(frozen=True)
class LaunchSettings:
    """Bounded waits used while confirming daemon liveness."""

    grace_seconds: float
    liveness_timeout_seconds: float


@dataclass(frozen=True)
class RuntimeConfig:  # pylint: disable=too-many-instance-attributes
    """Top-level configuration aggregate, built once per run."""

    architecture: str
    file_root: Path
    http_port: int
    node: NodeSettings
    proxy: ProxySettings
    monitoring: MonitoringSettings
    tunnel: TunnelSettings
    subscription: SubscriptionSettings
    artifact_sources: Mapping[str, str]
    launch: LaunchSettings
    download_timeout_seconds: float
