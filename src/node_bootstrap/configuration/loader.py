"""Configuration loader service."""

from __future__ import annotations

import os
import platform
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    LaunchSettings,
    MonitoringSettings,
    NodeSettings,
    ProxySettings,
    RuntimeConfig,
    SubscriptionSettings,
    TunnelSettings,
)

DEFAULT_ARTIFACT_SOURCES = {
    "amd64": "https://amd64.ssss.nyc.mn",
    "arm64": "https://arm64.ssss.nyc.mn",
}

# Environment variable -> (section, key); a section of None addresses the root.
ENVIRONMENT_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "ARCH": (None, "architecture"),
    "FILE_PATH": (None, "file_root"),
    "PORT": (None, "http_port"),
    "SERVER_PORT": (None, "http_port"),
    "UUID": ("node", "uuid"),
    "NODE_NAME": ("node", "name"),
    "ARGO_PORT": ("proxy", "listen_port"),
    "CFIP": ("proxy", "edge_address"),
    "CFPORT": ("proxy", "edge_port"),
    "NEZHA_SERVER": ("monitoring", "server"),
    "NEZHA_PORT": ("monitoring", "port"),
    "NEZHA_KEY": ("monitoring", "key"),
    "ARGO_AUTH": ("tunnel", "token"),
    "ARGO_DOMAIN": ("tunnel", "domain"),
    "SUB_PATH": ("subscription", "path"),
}


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(
    config_path: Path | str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> RuntimeConfig:
    """Load the optional YAML file, apply environment overrides and validate."""
    parsed: Mapping[str, Any] = {}
    if config_path is not None:
        parsed = _read_configuration_file(Path(config_path))
    merged = apply_environment_overrides(parsed, os.environ if environ is None else environ)

    architecture = _optional_string(merged.get("architecture"), "architecture")
    file_root = _optional_string(merged.get("file_root"), "file_root") or "./tmp"
    http_port = _require_port(merged.get("http_port", 3000), "http_port")

    return RuntimeConfig(
        architecture=architecture or platform.machine(),
        file_root=Path(file_root).expanduser().resolve(),
        http_port=http_port,
        node=_parse_node_section(merged.get("node")),
        proxy=_parse_proxy_section(merged.get("proxy")),
        monitoring=_parse_monitoring_section(merged.get("monitoring")),
        tunnel=_parse_tunnel_section(merged.get("tunnel")),
        subscription=_parse_subscription_section(merged.get("subscription")),
        artifact_sources=_parse_artifact_sources(merged.get("artifacts")),
        launch=_parse_launch_section(merged.get("launch")),
        download_timeout_seconds=_require_positive_number(
            _optional_mapping(merged.get("download"), "download").get("timeout_seconds", 60),
            "download.timeout_seconds",
        ),
    )


def apply_environment_overrides(
    parsed: Mapping[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    """Return a copy of the parsed document with non-empty environment values applied."""
    merged: dict[str, Any] = {
        key: dict(value) if isinstance(value, Mapping) else value for key, value in parsed.items()
    }
    for variable, (section, key) in ENVIRONMENT_OVERRIDES.items():
        value = environ.get(variable)
        if value is None or not value.strip():
            continue
        if section is None:
            merged[key] = value.strip()
            continue
        target = merged.get(section)
        if not isinstance(target, dict):
            target = {}
            merged[section] = target
        target[key] = value.strip()
    return merged


def _read_configuration_file(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")
    return parsed


def _parse_node_section(value: Any) -> NodeSettings:
    section = _optional_mapping(value, "node")
    raw_uuid = _require_non_empty_string(section.get("uuid"), "node.uuid")
    try:
        node_uuid = str(uuid.UUID(raw_uuid))
    except ValueError as exc:
        raise ConfigurationError(f"node.uuid '{raw_uuid}' is not a valid UUID.") from exc
    name = _optional_string(section.get("name"), "node.name") or "node"
    return NodeSettings(uuid=node_uuid, name=name)


def _parse_proxy_section(value: Any) -> ProxySettings:
    section = _optional_mapping(value, "proxy")
    return ProxySettings(
        listen_port=_require_port(section.get("listen_port", 8001), "proxy.listen_port"),
        edge_address=_optional_string(section.get("edge_address"), "proxy.edge_address")
        or "cdns.doon.eu.org",
        edge_port=_require_port(section.get("edge_port", 443), "proxy.edge_port"),
    )


def _parse_monitoring_section(value: Any) -> MonitoringSettings:
    section = _optional_mapping(value, "monitoring")
    port_value = section.get("port")
    port = None if port_value in (None, "") else _require_port(port_value, "monitoring.port")
    return MonitoringSettings(
        server=_optional_string(section.get("server"), "monitoring.server"),
        port=port,
        key=_optional_string(section.get("key"), "monitoring.key"),
    )


def _parse_tunnel_section(value: Any) -> TunnelSettings:
    section = _optional_mapping(value, "tunnel")
    token = _optional_string(section.get("token"), "tunnel.token")
    domain = _optional_string(section.get("domain"), "tunnel.domain")
    if token and not domain:
        raise ConfigurationError("tunnel.domain is required when tunnel.token is set.")
    fallback = _optional_string(section.get("fallback_hostname"), "tunnel.fallback_hostname")
    return TunnelSettings(
        token=token,
        domain=domain,
        fallback_hostname=fallback or domain or "localhost",
        discovery_timeout_seconds=_require_positive_number(
            section.get("discovery_timeout_seconds", 30), "tunnel.discovery_timeout_seconds"
        ),
    )


def _parse_subscription_section(value: Any) -> SubscriptionSettings:
    section = _optional_mapping(value, "subscription")
    path = _optional_string(section.get("path"), "subscription.path") or "sub"
    path = path.strip("/")
    if not path or "/" in path:
        raise ConfigurationError("subscription.path must be a single non-empty path segment.")
    encode = section.get("encode_base64", True)
    if not isinstance(encode, bool):
        raise ConfigurationError("subscription.encode_base64 must be a boolean.")
    return SubscriptionSettings(path=path, encode_base64=encode)


def _parse_artifact_sources(value: Any) -> dict[str, str]:
    section = _optional_mapping(value, "artifacts")
    sources = _optional_mapping(section.get("sources"), "artifacts.sources")
    resolved = dict(DEFAULT_ARTIFACT_SOURCES)
    for key, url in sources.items():
        resolved[str(key)] = _require_non_empty_string(url, f"artifacts.sources.{key}").rstrip("/")
    return resolved


def _parse_launch_section(value: Any) -> LaunchSettings:
    section = _optional_mapping(value, "launch")
    grace = _require_positive_number(section.get("grace_seconds", 2), "launch.grace_seconds")
    timeout = _require_positive_number(
        section.get("liveness_timeout_seconds", 10), "launch.liveness_timeout_seconds"
    )
    if timeout < grace:
        raise ConfigurationError(
            "launch.liveness_timeout_seconds must not be shorter than launch.grace_seconds."
        )
    return LaunchSettings(grace_seconds=grace, liveness_timeout_seconds=timeout)


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_port(value: Any, field_name: str) -> int:
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not 0 < value < 65536:
        raise ConfigurationError(f"{field_name} must be between 1 and 65535.")
    return value


def _require_positive_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{field_name} must be a number.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return float(value)
