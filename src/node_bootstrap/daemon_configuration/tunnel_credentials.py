"""Tunnel credential classification and credential-file rendering."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from node_bootstrap.configuration.runtime_settings import RuntimeConfig


class TunnelMode(str, Enum):
    """How the tunnel authenticates and, by extension, how its hostname becomes known."""

    QUICK = "quick"
    TOKEN = "token"
    CREDENTIALS_FILE = "credentials_file"


class TunnelCredentialError(ValueError):
    """Raised when a credentials document cannot be used."""


def tunnel_mode(config: RuntimeConfig) -> TunnelMode:
    token = config.tunnel.token
    if not token:
        return TunnelMode.QUICK
    if "TunnelSecret" in token:
        return TunnelMode.CREDENTIALS_FILE
    return TunnelMode.TOKEN


def build_tunnel_config(config: RuntimeConfig, credentials_path: Path) -> dict[str, Any]:
    """Build the ingress document for a credentials-file tunnel."""
    try:
        credentials = json.loads(config.tunnel.token or "")
    except json.JSONDecodeError as exc:
        raise TunnelCredentialError(f"Tunnel credentials are not valid JSON: {exc}") from exc
    tunnel_id = credentials.get("TunnelID") if isinstance(credentials, dict) else None
    if not tunnel_id:
        raise TunnelCredentialError("Tunnel credentials do not contain a TunnelID.")
    return {
        "tunnel": tunnel_id,
        "credentials-file": str(credentials_path),
        "protocol": "http2",
        "ingress": [
            {
                "hostname": config.tunnel.domain,
                "service": f"http://localhost:{config.proxy.listen_port}",
                "originRequest": {"noTLSVerify": True},
            },
            {"service": "http_status:404"},
        ],
    }


def write_tunnel_credentials(
    config: RuntimeConfig, *, credentials_path: Path, config_path: Path
) -> Path:
    """Write the credentials document and its ingress config; returns the config path."""
    document = build_tunnel_config(config, credentials_path)
    credentials_path.write_text(config.tunnel.token or "", encoding="utf-8")
    config_path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
    return config_path
