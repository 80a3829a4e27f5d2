"""Boundary tests for subscription internal dependencies."""

from __future__ import annotations

from pathlib import Path


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def test_subscription_does_not_import_process_or_download_modules() -> None:
    subscription_dir = _project_root() / "src" / "node_bootstrap" / "subscription"
    forbidden_import_fragments = (
        "node_bootstrap.process_launch",
        "node_bootstrap.artifact_delivery",
        "node_bootstrap.orchestration",
        "tunnel_discovery.hostname_discovery",
    )

    for module_path in sorted(subscription_dir.glob("*.py")):
        text = module_path.read_text(encoding="utf-8")
        for fragment in forbidden_import_fragments:
            assert fragment not in text, f"Forbidden dependency in {module_path}: {fragment}"
