"""File root layout and stale-file cleanup."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

LOGGER = logging.getLogger(__name__)

MANAGED_FILENAMES = (
    "web",
    "bot",
    "npm",
    "php",
    "config.json",
    "config.yaml",
    "tunnel.json",
    "tunnel.yml",
)


class WorkspaceError(Exception):
    """Raised when the file root cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Paths of every file the bootstrap writes under the file root."""

    root: Path

    @property
    def proxy_config(self) -> Path:
        return self.root / "config.json"

    @property
    def monitoring_config(self) -> Path:
        return self.root / "config.yaml"

    @property
    def tunnel_credentials(self) -> Path:
        return self.root / "tunnel.json"

    @property
    def tunnel_config(self) -> Path:
        return self.root / "tunnel.yml"

    def binary(self, filename: str) -> Path:
        return self.root / filename


def prepare_workspace(
    root: Path, *, stale_filenames: Iterable[str] = MANAGED_FILENAMES
) -> WorkspaceLayout:
    """Create the file root and delete files left behind by an earlier run."""
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WorkspaceError(f"Cannot create file root {root}: {exc}") from exc
    if not root.is_dir():
        raise WorkspaceError(f"File root is not a directory: {root}")

    removed = 0
    for filename in stale_filenames:
        for candidate in (root / filename, root / f"{filename}.part"):
            if not candidate.is_file():
                continue
            try:
                candidate.unlink()
            except OSError as exc:
                raise WorkspaceError(f"Cannot remove stale file {candidate}: {exc}") from exc
            removed += 1
    if removed:
        LOGGER.info("Removed %d stale file(s) from %s", removed, root)
    return WorkspaceLayout(root=root)
