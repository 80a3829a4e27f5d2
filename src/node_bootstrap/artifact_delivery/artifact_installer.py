"""Marks fetched artifacts executable as one batch."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable, Sequence
from pathlib import Path

from .delivery_outcomes import InstalledArtifact

LOGGER = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o775

ChmodFunction = Callable[[Path, int], None]


class ArtifactPermissionError(PermissionError):
    """Raised when the batch cannot be made executable; no artifact is left changed."""

    def __init__(
        self, failed: InstalledArtifact, batch: Sequence[InstalledArtifact], cause: OSError
    ) -> None:
        paths = ", ".join(str(artifact.path) for artifact in batch)
        super().__init__(
            f"Could not mark {failed.path} executable ({cause}); batch rolled back: {paths}"
        )
        self.failed = failed
        self.batch = tuple(batch)
        self.cause = cause


def install_artifacts(
    artifacts: Sequence[InstalledArtifact], *, chmod: ChmodFunction | None = None
) -> tuple[InstalledArtifact, ...]:
    """Set the executable bit on every artifact, or restore all of them on failure.

    Re-running on already-executable files is a no-op.
    """
    apply_mode = chmod or _chmod
    original_modes: list[tuple[InstalledArtifact, int]] = []
    for artifact in artifacts:
        try:
            previous = stat.S_IMODE(artifact.path.stat().st_mode)
            apply_mode(artifact.path, EXECUTABLE_MODE)
        except OSError as exc:
            _restore_modes(original_modes, apply_mode)
            raise ArtifactPermissionError(artifact, artifacts, exc) from exc
        original_modes.append((artifact, previous))

    LOGGER.info("Marked %d artifact(s) executable", len(artifacts))
    return tuple(artifact.as_executable() for artifact in artifacts)


def _restore_modes(
    original_modes: Sequence[tuple[InstalledArtifact, int]], apply_mode: ChmodFunction
) -> None:
    for artifact, mode in reversed(original_modes):
        try:
            apply_mode(artifact.path, mode)
        except OSError as exc:
            LOGGER.warning("Could not restore mode of %s: %s", artifact.path, exc)


def _chmod(path: Path, mode: int) -> None:
    os.chmod(path, mode)
