"""Tunnel handle and discovery outcome entities."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

LOGGER = logging.getLogger(__name__)

_END_OF_STREAM = object()


class DiscoverySource(str, Enum):
    """Where a discovery result came from."""

    CACHED = "cached"
    DISCOVERED = "discovered"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class DiscoveryResult:
    """Hostname resolved by one discovery call."""

    hostname: str
    source: DiscoverySource


class LineStream:
    """Lazy view of a process's output lines, pumped by a background reader thread.

    The reader keeps draining the source for the process lifetime so the writer never
    blocks on a full pipe; lines are only buffered until `stop_buffering` is called,
    and at most `max_buffered` of them.
    """

    def __init__(
        self, lines: Iterable[str], *, name: str = "tunnel-output", max_buffered: int = 1024
    ) -> None:
        self._queue: queue.Queue[object] = queue.Queue(maxsize=max_buffered)
        self._buffering = threading.Event()
        self._buffering.set()
        self._thread = threading.Thread(target=self._pump, args=(lines,), name=name, daemon=True)
        self._thread.start()

    def read_until(self, deadline: float, clock: Callable[[], float]) -> Iterator[str]:
        """Yield lines as they arrive until end of stream or the deadline passes."""
        while True:
            remaining = deadline - clock()
            if remaining <= 0:
                return
            try:
                item = self._queue.get(timeout=remaining)
            except queue.Empty:
                continue
            if item is _END_OF_STREAM:
                # Keep the marker for later readers.
                self._queue.put(_END_OF_STREAM)
                return
            yield str(item)

    def stop_buffering(self) -> None:
        self._buffering.clear()
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            if item is _END_OF_STREAM:
                self._queue.put(_END_OF_STREAM)
                return

    def _pump(self, lines: Iterable[str]) -> None:
        try:
            for line in lines:
                if not self._buffering.is_set():
                    LOGGER.debug("%s", line.rstrip())
                    continue
                try:
                    self._queue.put_nowait(line)
                except queue.Full:
                    LOGGER.debug("Output buffer full, dropped: %s", line.rstrip())
        except (OSError, ValueError) as exc:
            LOGGER.debug("Output stream closed: %s", exc)
        finally:
            self._put_end_marker()

    def _put_end_marker(self) -> None:
        while True:
            try:
                self._queue.put_nowait(_END_OF_STREAM)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    continue


class TunnelHandle:
    """Tunnel output plus its public hostname, which can be set only once.

    The discovery task is the single writer; request handlers read `hostname` without
    locking and always see either nothing or the complete published value.
    """

    def __init__(self, output: LineStream | None = None) -> None:
        self.output = output
        self._hostname: str | None = None
        self._publish_lock = threading.Lock()
        self._published = threading.Event()

    @classmethod
    def with_fixed_hostname(cls, hostname: str) -> TunnelHandle:
        handle = cls()
        handle.publish(hostname)
        return handle

    @property
    def hostname(self) -> str | None:
        return self._hostname

    def publish(self, hostname: str) -> str:
        """Set the hostname if unset; returns whichever value is now in effect."""
        with self._publish_lock:
            if self._hostname is None:
                self._hostname = hostname
                self._published.set()
                LOGGER.info("Tunnel hostname: %s", hostname)
            return self._hostname

    def wait_for_hostname(self, timeout_seconds: float) -> str | None:
        self._published.wait(timeout_seconds)
        return self._hostname
