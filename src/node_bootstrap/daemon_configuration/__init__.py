"""Daemon configuration exports."""

from .command_lines import monitoring_command, proxy_core_command, tunnel_command
from .monitoring_config import (
    TLS_PORTS,
    build_monitoring_config,
    server_port,
    uses_tls,
    write_monitoring_config,
)
from .proxy_core_config import WEBSOCKET_INBOUNDS, build_proxy_core_config, write_proxy_core_config
from .tunnel_credentials import (
    TunnelCredentialError,
    TunnelMode,
    build_tunnel_config,
    tunnel_mode,
    write_tunnel_credentials,
)

__all__ = [
    "TLS_PORTS",
    "WEBSOCKET_INBOUNDS",
    "TunnelCredentialError",
    "TunnelMode",
    "build_monitoring_config",
    "build_proxy_core_config",
    "build_tunnel_config",
    "monitoring_command",
    "proxy_core_command",
    "server_port",
    "tunnel_command",
    "tunnel_mode",
    "uses_tls",
    "write_monitoring_config",
    "write_proxy_core_config",
    "write_tunnel_credentials",
]
