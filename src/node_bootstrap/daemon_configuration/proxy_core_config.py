"""Proxy core configuration document."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from node_bootstrap.configuration.runtime_settings import RuntimeConfig

# Transport path -> (internal loopback port, inbound protocol).
WEBSOCKET_INBOUNDS: dict[str, tuple[int, str]] = {
    "/vless-argo": (3002, "vless"),
    "/vmess-argo": (3003, "vmess"),
    "/trojan-argo": (3004, "trojan"),
}
TCP_FALLBACK_PORT = 3001


def build_proxy_core_config(config: RuntimeConfig) -> dict[str, Any]:
    """Build the proxy core document: one public inbound falling back to loopback ws inbounds."""
    node_uuid = config.node.uuid
    fallbacks: list[dict[str, Any]] = [{"dest": TCP_FALLBACK_PORT}]
    fallbacks.extend(
        {"path": path, "dest": port} for path, (port, _protocol) in WEBSOCKET_INBOUNDS.items()
    )
    inbounds: list[dict[str, Any]] = [
        {
            "port": config.proxy.listen_port,
            "protocol": "vless",
            "settings": {
                "clients": [{"id": node_uuid, "flow": "xtls-rprx-vision"}],
                "decryption": "none",
                "fallbacks": fallbacks,
            },
            "streamSettings": {"network": "tcp"},
        },
        {
            "port": TCP_FALLBACK_PORT,
            "listen": "127.0.0.1",
            "protocol": "vless",
            "settings": {"clients": [{"id": node_uuid}], "decryption": "none"},
            "streamSettings": {"network": "tcp", "security": "none"},
        },
    ]
    inbounds.extend(
        _websocket_inbound(path, port, protocol, node_uuid)
        for path, (port, protocol) in WEBSOCKET_INBOUNDS.items()
    )
    return {
        "log": {"access": "/dev/null", "error": "/dev/null", "loglevel": "none"},
        "inbounds": inbounds,
        "dns": {"servers": ["https+local://8.8.8.8/dns-query"]},
        "outbounds": [
            {"protocol": "freedom", "tag": "direct"},
            {"protocol": "blackhole", "tag": "block"},
        ],
    }


def write_proxy_core_config(config: RuntimeConfig, destination: Path) -> Path:
    destination.write_text(json.dumps(build_proxy_core_config(config), indent=2), encoding="utf-8")
    return destination


def _websocket_inbound(path: str, port: int, protocol: str, node_uuid: str) -> dict[str, Any]:
    if protocol == "trojan":
        settings: dict[str, Any] = {"clients": [{"password": node_uuid}]}
    elif protocol == "vmess":
        settings = {"clients": [{"id": node_uuid, "alterId": 0}]}
    else:
        settings = {"clients": [{"id": node_uuid, "level": 0}], "decryption": "none"}
    return {
        "port": port,
        "listen": "127.0.0.1",
        "protocol": protocol,
        "settings": settings,
        "streamSettings": {"network": "ws", "security": "none", "wsSettings": {"path": path}},
        "sniffing": {
            "enabled": True,
            "destOverride": ["http", "tls", "quic"],
            "metadataOnly": False,
        },
    }
