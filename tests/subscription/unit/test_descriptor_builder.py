"""Subscription descriptor rendering tests."""

from __future__ import annotations

import base64
import json
from dataclasses import replace
from urllib.parse import parse_qs, urlsplit

from node_bootstrap.configuration import RuntimeConfig, SubscriptionSettings, load_configuration
from node_bootstrap.subscription import build_descriptor_lines, render_subscription

NODE_UUID = "9afd1229-b893-40c1-84dd-51e7ce204913"
HOSTNAME = "quiet-fox-amber-12.trycloudflare.com"


def _config(**environ: str) -> RuntimeConfig:
    values = {
        "UUID": NODE_UUID,
        "NODE_NAME": "Edge Node #1",
        "CFIP": "cdn.example.net",
        "CFPORT": "8443",
        "ARCH": "x86_64",
    }
    values.update(environ)
    return load_configuration(environ=values)


def test_descriptor_lists_one_link_per_protocol() -> None:
    lines = build_descriptor_lines(_config(), HOSTNAME)

    assert [line.split("://", 1)[0] for line in lines] == ["vless", "vmess", "trojan"]


def test_vless_link_routes_through_edge_to_tunnel_hostname() -> None:
    vless = urlsplit(build_descriptor_lines(_config(), HOSTNAME)[0])

    assert vless.username == NODE_UUID
    assert vless.hostname == "cdn.example.net"
    assert vless.port == 8443
    query = parse_qs(vless.query)
    assert query["sni"] == [HOSTNAME]
    assert query["host"] == [HOSTNAME]
    assert query["type"] == ["ws"]
    assert query["path"] == ["/vless-argo?ed=2560"]
    assert vless.fragment == "Edge%20Node%20%231"


def test_vmess_link_carries_json_document() -> None:
    vmess = build_descriptor_lines(_config(), HOSTNAME)[1]

    document = json.loads(base64.b64decode(vmess.removeprefix("vmess://")))
    assert document["ps"] == "Edge Node #1"
    assert document["add"] == "cdn.example.net"
    assert document["port"] == "8443"
    assert document["id"] == NODE_UUID
    assert document["host"] == HOSTNAME
    assert document["path"] == "/vmess-argo?ed=2560"


def test_trojan_link_uses_uuid_as_password() -> None:
    trojan = urlsplit(build_descriptor_lines(_config(), HOSTNAME)[2])

    assert trojan.username == NODE_UUID
    assert parse_qs(trojan.query)["path"] == ["/trojan-argo?ed=2560"]


def test_subscription_is_base64_by_default() -> None:
    body = render_subscription(_config(), HOSTNAME)

    decoded = base64.b64decode(body).decode("utf-8")
    assert decoded.splitlines() == list(build_descriptor_lines(_config(), HOSTNAME))


def test_subscription_can_be_rendered_as_plain_text() -> None:
    config = _config()
    plain = replace(config, subscription=SubscriptionSettings(path="sub", encode_base64=False))

    body = render_subscription(plain, HOSTNAME)

    assert body.startswith("vless://")
    assert body.endswith("\n")


def test_rendering_is_deterministic() -> None:
    config = _config()

    assert render_subscription(config, HOSTNAME) == render_subscription(config, HOSTNAME)
