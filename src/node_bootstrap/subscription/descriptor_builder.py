"""Subscription descriptor rendering."""

from __future__ import annotations

import base64
import json
from urllib.parse import quote, urlencode

from node_bootstrap.configuration.runtime_settings import RuntimeConfig

EARLY_DATA_SUFFIX = "?ed=2560"
CLIENT_FINGERPRINT = "firefox"


def build_descriptor_lines(config: RuntimeConfig, hostname: str) -> tuple[str, ...]:
    """Build one vless, vmess and trojan link routed through the edge to `hostname`."""
    node = config.node
    proxy = config.proxy
    endpoint = f"{node.uuid}@{proxy.edge_address}:{proxy.edge_port}"
    label = quote(node.name, safe="")

    vless_query = urlencode(
        {
            "encryption": "none",
            "security": "tls",
            "sni": hostname,
            "fp": CLIENT_FINGERPRINT,
            "type": "ws",
            "host": hostname,
            "path": f"/vless-argo{EARLY_DATA_SUFFIX}",
        },
        quote_via=quote,
        safe="",
    )
    trojan_query = urlencode(
        {
            "security": "tls",
            "sni": hostname,
            "fp": CLIENT_FINGERPRINT,
            "type": "ws",
            "host": hostname,
            "path": f"/trojan-argo{EARLY_DATA_SUFFIX}",
        },
        quote_via=quote,
        safe="",
    )
    vmess_document = {
        "v": "2",
        "ps": node.name,
        "add": proxy.edge_address,
        "port": str(proxy.edge_port),
        "id": node.uuid,
        "aid": "0",
        "scy": "none",
        "net": "ws",
        "type": "none",
        "host": hostname,
        "path": f"/vmess-argo{EARLY_DATA_SUFFIX}",
        "tls": "tls",
        "sni": hostname,
        "alpn": "",
        "fp": CLIENT_FINGERPRINT,
    }
    vmess_payload = base64.b64encode(
        json.dumps(vmess_document, separators=(",", ":")).encode("utf-8")
    ).decode("ascii")
    return (
        f"vless://{endpoint}?{vless_query}#{label}",
        f"vmess://{vmess_payload}",
        f"trojan://{endpoint}?{trojan_query}#{label}",
    )


def render_subscription(config: RuntimeConfig, hostname: str) -> str:
    """Render the subscription body; base64-wrapped unless disabled in configuration."""
    text = "\n".join(build_descriptor_lines(config, hostname)) + "\n"
    if not config.subscription.encode_base64:
        return text
    return base64.b64encode(text.encode("utf-8")).decode("ascii")
