"""Artifact catalog tests."""

from __future__ import annotations

import pytest
from node_bootstrap.artifact_catalog import (
    ARCHITECTURE_ALIASES,
    ArtifactRole,
    UnsupportedArchitectureError,
    normalize_architecture,
    select_artifacts,
)
from node_bootstrap.configuration import RuntimeConfig, load_configuration

NODE_UUID = "9afd1229-b893-40c1-84dd-51e7ce204913"
MONITORING_ROLES = {ArtifactRole.MONITOR_AGENT, ArtifactRole.MONITOR_LEGACY}


def _config(**environ: str) -> RuntimeConfig:
    values = {"UUID": NODE_UUID, "ARCH": "x86_64"}
    values.update(environ)
    return load_configuration(environ=values)


def test_monitoring_disabled_selects_proxy_core_and_relay() -> None:
    specs = select_artifacts(_config())

    assert [spec.name for spec in specs] == [ArtifactRole.PROXY_CORE, ArtifactRole.RELAY]
    assert [spec.filename for spec in specs] == ["web", "bot"]
    assert specs[0].url == "https://amd64.ssss.nyc.mn/web"


def test_monitoring_with_port_prepends_agent_mode_artifact() -> None:
    specs = select_artifacts(
        _config(NEZHA_SERVER="monitor.example.com", NEZHA_PORT="5555", NEZHA_KEY="secret")
    )

    assert [spec.name for spec in specs] == [
        ArtifactRole.MONITOR_AGENT,
        ArtifactRole.PROXY_CORE,
        ArtifactRole.RELAY,
    ]
    assert specs[0].filename == "npm"


def test_monitoring_without_port_prepends_legacy_mode_artifact() -> None:
    specs = select_artifacts(_config(NEZHA_SERVER="monitor.example.com:8008", NEZHA_KEY="secret"))

    assert specs[0].name is ArtifactRole.MONITOR_LEGACY
    assert specs[0].filename == "php"


@pytest.mark.parametrize("architecture", sorted(ARCHITECTURE_ALIASES))
@pytest.mark.parametrize(
    "monitoring",
    [
        {},
        {"NEZHA_SERVER": "m.example.com", "NEZHA_PORT": "443", "NEZHA_KEY": "k"},
        {"NEZHA_SERVER": "m.example.com:443", "NEZHA_KEY": "k"},
    ],
)
def test_every_supported_architecture_has_exactly_one_core_and_relay(
    architecture: str, monitoring: dict[str, str]
) -> None:
    specs = select_artifacts(_config(ARCH=architecture, **monitoring))
    names = [spec.name for spec in specs]

    assert names.count(ArtifactRole.PROXY_CORE) == 1
    assert names.count(ArtifactRole.RELAY) == 1
    assert len([name for name in names if name in MONITORING_ROLES]) <= 1
    assert len(set(names)) == len(names)


def test_architecture_selects_matching_source() -> None:
    specs = select_artifacts(_config(ARCH="aarch64"))

    assert all(spec.url.startswith("https://arm64.ssss.nyc.mn/") for spec in specs)


def test_selection_is_deterministic() -> None:
    configuration = _config(NEZHA_SERVER="m.example.com", NEZHA_PORT="443", NEZHA_KEY="k")

    assert select_artifacts(configuration) == select_artifacts(configuration)


def test_unknown_architecture_fails_without_partial_catalog() -> None:
    with pytest.raises(UnsupportedArchitectureError, match="s390x"):
        select_artifacts(_config(ARCH="s390x"))


def test_normalize_architecture_is_case_insensitive() -> None:
    assert normalize_architecture("X86_64") == "amd64"
    assert normalize_architecture("ARM64") == "arm64"
