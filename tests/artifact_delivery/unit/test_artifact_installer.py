"""Artifact installer tests."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest
from node_bootstrap.artifact_catalog import ArtifactRole
from node_bootstrap.artifact_delivery import (
    EXECUTABLE_MODE,
    ArtifactPermissionError,
    InstalledArtifact,
    install_artifacts,
)


def _fetched(tmp_path: Path) -> tuple[InstalledArtifact, ...]:
    artifacts = []
    for role, filename in (
        (ArtifactRole.PROXY_CORE, "web"),
        (ArtifactRole.RELAY, "bot"),
        (ArtifactRole.MONITOR_AGENT, "npm"),
    ):
        path = tmp_path / filename
        path.write_bytes(b"binary")
        path.chmod(0o644)
        artifacts.append(InstalledArtifact(name=role, path=path))
    return tuple(artifacts)


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


def test_install_marks_every_artifact_executable(tmp_path: Path) -> None:
    installed = install_artifacts(_fetched(tmp_path))

    assert all(artifact.executable for artifact in installed)
    assert all(_mode(artifact.path) == EXECUTABLE_MODE for artifact in installed)


def test_install_is_idempotent(tmp_path: Path) -> None:
    first = install_artifacts(_fetched(tmp_path))
    second = install_artifacts(first)

    assert second == first
    assert all(_mode(artifact.path) == EXECUTABLE_MODE for artifact in second)


def test_failure_midway_restores_batch(tmp_path: Path) -> None:
    artifacts = _fetched(tmp_path)
    failing_path = artifacts[1].path

    def chmod(path: Path, mode: int) -> None:
        if path == failing_path and mode == EXECUTABLE_MODE:
            raise PermissionError(1, "Operation not permitted", str(path))
        os.chmod(path, mode)

    with pytest.raises(ArtifactPermissionError) as excinfo:
        install_artifacts(artifacts, chmod=chmod)

    assert isinstance(excinfo.value, PermissionError)
    assert excinfo.value.failed == artifacts[1]
    assert excinfo.value.batch == artifacts
    assert str(failing_path) in str(excinfo.value)
    assert [_mode(artifact.path) for artifact in artifacts] == [0o644, 0o644, 0o644]


def test_missing_file_fails_batch(tmp_path: Path) -> None:
    artifacts = _fetched(tmp_path)
    artifacts[2].path.unlink()

    with pytest.raises(ArtifactPermissionError):
        install_artifacts(artifacts)

    assert _mode(artifacts[0].path) == 0o644
    assert _mode(artifacts[1].path) == 0o644
