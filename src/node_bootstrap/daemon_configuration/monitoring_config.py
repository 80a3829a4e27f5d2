"""Monitoring agent configuration and TLS inference."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from node_bootstrap.configuration.runtime_settings import RuntimeConfig

TLS_PORTS = frozenset({443, 8443, 2096, 2087, 2083, 2053})


def uses_tls(port: int | None) -> bool:
    return port in TLS_PORTS


def server_port(server: str) -> int | None:
    """Port embedded in a legacy-mode `host:port` server value, if any."""
    _host, separator, raw_port = server.rpartition(":")
    if not separator or not raw_port.isdigit():
        return None
    return int(raw_port)


def build_monitoring_config(config: RuntimeConfig) -> dict[str, Any]:
    """Build the legacy-mode agent document, which carries the server address and secret."""
    monitoring = config.monitoring
    if not monitoring.enabled:
        raise ValueError("Monitoring is not enabled.")
    server = monitoring.server or ""
    return {
        "client_secret": monitoring.key,
        "debug": False,
        "disable_auto_update": True,
        "disable_command_execute": False,
        "disable_force_update": True,
        "disable_nat": False,
        "disable_send_query": False,
        "gpu": False,
        "insecure_tls": False,
        "ip_report_period": 1800,
        "report_delay": 4,
        "server": server,
        "skip_connection_count": True,
        "skip_procs_count": True,
        "temperature": False,
        "tls": uses_tls(server_port(server)),
        "use_gitee_to_upgrade": False,
        "use_ipv6_country_code": False,
        "uuid": config.node.uuid,
    }


def write_monitoring_config(config: RuntimeConfig, destination: Path) -> Path:
    destination.write_text(
        yaml.safe_dump(build_monitoring_config(config), sort_keys=True), encoding="utf-8"
    )
    return destination
