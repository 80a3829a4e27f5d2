"""Liveness checks confirming a spawned daemon is up."""

from __future__ import annotations

import socket
import subprocess
import time
from collections.abc import Callable

from .daemon_models import ProcessLike

Probe = Callable[[], bool]


class GracePeriodLiveness:
    """Live when the process is still running once the grace delay has elapsed."""

    def __init__(self, grace_seconds: float) -> None:
        self.grace_seconds = grace_seconds

    def describe(self) -> str:
        return f"alive after {self.grace_seconds:g}s grace period"

    def await_liveness(self, process: ProcessLike) -> bool:
        try:
            process.wait(timeout=self.grace_seconds)
        except subprocess.TimeoutExpired:
            return True
        return False


class PollingLiveness:
    """Live when the probe succeeds strictly before the deadline while the process runs."""

    def __init__(
        self,
        probe: Probe,
        *,
        timeout_seconds: float,
        interval_seconds: float = 0.25,
        description: str = "readiness probe",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._probe = probe
        self.timeout_seconds = timeout_seconds
        self._interval_seconds = interval_seconds
        self._description = description
        self._clock = clock
        self._sleep = sleep

    def describe(self) -> str:
        return f"{self._description} within {self.timeout_seconds:g}s"

    def await_liveness(self, process: ProcessLike) -> bool:
        deadline = self._clock() + self.timeout_seconds
        while True:
            if self._clock() >= deadline:
                return False
            if process.poll() is not None:
                return False
            if self._probe():
                # The check may block. Success seen at or past the deadline is too late.
                return self._clock() < deadline
            remaining = deadline - self._clock()
            if remaining > 0:
                self._sleep(min(self._interval_seconds, remaining))


def tcp_port_probe(host: str, port: int, *, connect_timeout: float = 0.5) -> Probe:
    """Probe that succeeds once something accepts TCP connections on host:port."""

    def probe() -> bool:
        try:
            with socket.create_connection((host, port), timeout=connect_timeout):
                return True
        except OSError:
            return False

    return probe
