"""Command lines of the daemons the node runs."""

from __future__ import annotations

from node_bootstrap.configuration.runtime_settings import MonitoringMode, RuntimeConfig
from node_bootstrap.workspace.workspace_layout import WorkspaceLayout

from .monitoring_config import uses_tls
from .tunnel_credentials import TunnelMode

_TUNNEL_COMMON_ARGS = ("tunnel", "--edge-ip-version", "auto")


def monitoring_command(
    config: RuntimeConfig, layout: WorkspaceLayout, binary_filename: str
) -> tuple[str, ...]:
    monitoring = config.monitoring
    binary = str(layout.binary(binary_filename))
    if monitoring.mode is MonitoringMode.LEGACY:
        return (binary, "-c", str(layout.monitoring_config))
    if monitoring.mode is MonitoringMode.AGENT:
        command = [
            binary,
            "-s",
            f"{monitoring.server}:{monitoring.port}",
            "-p",
            str(monitoring.key),
        ]
        if uses_tls(monitoring.port):
            command.append("--tls")
        command.extend(
            ["--disable-auto-update", "--report-delay", "4", "--skip-conn", "--skip-procs"]
        )
        return tuple(command)
    raise ValueError("Monitoring is not enabled.")


def proxy_core_command(layout: WorkspaceLayout, binary_filename: str) -> tuple[str, ...]:
    return (str(layout.binary(binary_filename)), "-c", str(layout.proxy_config))


def tunnel_command(
    config: RuntimeConfig, layout: WorkspaceLayout, binary_filename: str, mode: TunnelMode
) -> tuple[str, ...]:
    binary = str(layout.binary(binary_filename))
    if mode is TunnelMode.CREDENTIALS_FILE:
        return (binary, *_TUNNEL_COMMON_ARGS, "--config", str(layout.tunnel_config), "run")
    if mode is TunnelMode.TOKEN:
        return (
            binary,
            *_TUNNEL_COMMON_ARGS,
            "--no-autoupdate",
            "--protocol",
            "http2",
            "run",
            "--token",
            str(config.tunnel.token),
        )
    return (
        binary,
        *_TUNNEL_COMMON_ARGS,
        "--no-autoupdate",
        "--protocol",
        "http2",
        "--url",
        f"http://localhost:{config.proxy.listen_port}",
    )
