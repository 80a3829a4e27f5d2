"""Detached daemon spawning with liveness confirmation."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from .daemon_models import DaemonHandle, DaemonSpec, DaemonState, ProcessLike

LOGGER = logging.getLogger(__name__)

PopenFactory = Callable[..., ProcessLike]


class DaemonStartError(Exception):
    """Raised when a daemon cannot be spawned or never confirms liveness."""

    def __init__(self, handle: DaemonHandle) -> None:
        super().__init__(f"Daemon '{handle.name}' failed to start: {handle.failure}")
        self.handle = handle


class DaemonLauncher:  # pylint: disable=too-few-public-methods
    """Spawns one daemon at a time and reports it running only after liveness is observed."""

    def __init__(
        self,
        *,
        popen_factory: PopenFactory | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._popen_factory: PopenFactory = popen_factory or subprocess.Popen
        self._now = now or (lambda: datetime.now(UTC))

    def launch(self, spec: DaemonSpec) -> DaemonHandle:
        handle = DaemonHandle(name=spec.name, liveness=spec.liveness.describe())
        handle = handle.transition(DaemonState.STARTING)
        LOGGER.info("Starting %s: %s", spec.name, shlex.join(spec.argv))
        try:
            process = self._popen_factory(list(spec.argv), **_spawn_options(spec))
        except OSError as exc:
            failed = handle.transition(DaemonState.FAILED, failure=f"spawn failed: {exc}")
            raise DaemonStartError(failed) from exc

        handle = handle.attach(process, self._now())
        if not spec.liveness.await_liveness(process):
            exit_code = process.poll()
            reason = (
                f"exited with code {exit_code}"
                if exit_code is not None
                else f"no liveness signal ({handle.liveness})"
            )
            failed = handle.transition(DaemonState.FAILED, failure=reason)
            failed.terminate()
            if process.stdout is not None:
                process.stdout.close()
            raise DaemonStartError(failed)

        running = handle.transition(DaemonState.RUNNING)
        LOGGER.info("%s is running (pid %s)", spec.name, running.pid)
        return running


def _spawn_options(spec: DaemonSpec) -> dict[str, Any]:
    options: dict[str, Any] = {
        "stdin": subprocess.DEVNULL,
        "start_new_session": True,
        "close_fds": True,
        "cwd": spec.cwd,
    }
    if spec.attach_output:
        options.update(
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
            errors="replace",
        )
    else:
        options.update(stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    return options
