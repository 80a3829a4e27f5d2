"""Daemon lifecycle entities."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import IO, Any, Protocol

LOGGER = logging.getLogger(__name__)


class DaemonState(str, Enum):
    """Lifecycle of one spawned daemon."""

    NOT_STARTED = "not_started"
    STARTING = "starting"
    RUNNING = "running"
    FAILED = "failed"


_ALLOWED_TRANSITIONS: dict[DaemonState, frozenset[DaemonState]] = {
    DaemonState.NOT_STARTED: frozenset({DaemonState.STARTING}),
    DaemonState.STARTING: frozenset({DaemonState.RUNNING, DaemonState.FAILED}),
    DaemonState.RUNNING: frozenset(),
    DaemonState.FAILED: frozenset(),
}


class InvalidDaemonTransition(Exception):
    """Raised when a daemon handle is moved along an edge the lifecycle does not have."""


class ProcessLike(Protocol):
    """Subset of `subprocess.Popen` the launcher relies on."""

    pid: int
    stdout: IO[str] | None

    def poll(self) -> int | None: ...

    def wait(self, timeout: float | None = None) -> int: ...

    def terminate(self) -> None: ...

    def kill(self) -> None: ...


class LivenessCheck(Protocol):
    """Decides whether a freshly spawned process reached a functioning state."""

    def describe(self) -> str: ...

    def await_liveness(self, process: ProcessLike) -> bool: ...


@dataclass(frozen=True)
class DaemonSpec:
    """What to run and how to tell it came up."""

    name: str
    argv: tuple[str, ...]
    liveness: LivenessCheck
    attach_output: bool = False
    cwd: Path | None = None


@dataclass(frozen=True)
class DaemonHandle:  # pylint: disable=too-many-instance-attributes
    """Observed state of one daemon; only `RUNNING` after liveness was confirmed."""

    name: str
    liveness: str
    state: DaemonState = DaemonState.NOT_STARTED
    pid: int | None = None
    started_at: datetime | None = None
    failure: str | None = None
    process: ProcessLike | None = field(default=None, compare=False, repr=False)

    def transition(self, target: DaemonState, **changes: Any) -> DaemonHandle:
        if target not in _ALLOWED_TRANSITIONS[self.state]:
            raise InvalidDaemonTransition(
                f"{self.name}: cannot move from {self.state.value} to {target.value}"
            )
        LOGGER.debug("%s: %s -> %s", self.name, self.state.value, target.value)
        return replace(self, state=target, **changes)

    def attach(self, process: ProcessLike, started_at: datetime) -> DaemonHandle:
        if self.state is not DaemonState.STARTING:
            raise InvalidDaemonTransition(f"{self.name}: process attached outside of starting")
        return replace(self, process=process, pid=process.pid, started_at=started_at)

    @property
    def is_running(self) -> bool:
        return self.state is DaemonState.RUNNING

    @property
    def output(self) -> Iterable[str]:
        """Live output lines; only available for daemons launched with attached output."""
        if self.process is None or self.process.stdout is None:
            raise ValueError(f"{self.name} was not launched with attached output.")
        return self.process.stdout

    def terminate(self, timeout_seconds: float = 5.0) -> None:
        """Stop the process if it is still alive; escalates to kill after the timeout."""
        process = self.process
        if process is None or process.poll() is not None:
            return
        LOGGER.info("Terminating %s (pid %s)", self.name, self.pid)
        try:
            process.terminate()
            try:
                process.wait(timeout=timeout_seconds)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait(timeout=timeout_seconds)
        except ProcessLookupError:
            return
