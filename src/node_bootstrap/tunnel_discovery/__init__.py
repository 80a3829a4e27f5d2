"""Tunnel discovery exports."""

from .hostname_discovery import (
    QUICK_TUNNEL_PATTERN,
    discover_tunnel_hostname,
    start_background_discovery,
)
from .tunnel_models import DiscoveryResult, DiscoverySource, LineStream, TunnelHandle

__all__ = [
    "QUICK_TUNNEL_PATTERN",
    "DiscoveryResult",
    "DiscoverySource",
    "LineStream",
    "TunnelHandle",
    "discover_tunnel_hostname",
    "start_background_discovery",
]
