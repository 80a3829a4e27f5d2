"""Tunnel hostname discovery tests."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator

from node_bootstrap.tunnel_discovery import (
    DiscoverySource,
    LineStream,
    TunnelHandle,
    discover_tunnel_hostname,
    start_background_discovery,
)

QUICK_TUNNEL_OUTPUT = [
    "2026-01-01T00:00:00Z INF Requesting new quick Tunnel on trycloudflare.com...\n",
    "2026-01-01T00:00:01Z INF +----------------------------------------------------+\n",
    "2026-01-01T00:00:01Z INF |  https://quiet-fox-amber-12.trycloudflare.com      |\n",
    "2026-01-01T00:00:02Z INF Registered tunnel connection\n",
]


def _blocking_lines(release: threading.Event, lines: list[str]) -> Iterator[str]:
    yield from lines
    release.wait(10)


def test_hostname_is_discovered_from_output() -> None:
    handle = TunnelHandle(LineStream(QUICK_TUNNEL_OUTPUT))

    result = discover_tunnel_hostname(handle, timeout_seconds=5, fallback="node.example.com")

    assert result.source is DiscoverySource.DISCOVERED
    assert result.hostname == "quiet-fox-amber-12.trycloudflare.com"
    assert handle.hostname == "quiet-fox-amber-12.trycloudflare.com"


def test_second_discovery_returns_cached_hostname() -> None:
    handle = TunnelHandle(LineStream(QUICK_TUNNEL_OUTPUT))
    discover_tunnel_hostname(handle, timeout_seconds=5, fallback="node.example.com")

    again = discover_tunnel_hostname(handle, timeout_seconds=5, fallback="node.example.com")

    assert again.source is DiscoverySource.CACHED
    assert again.hostname == "quiet-fox-amber-12.trycloudflare.com"


def test_end_of_output_without_hostname_falls_back() -> None:
    handle = TunnelHandle(LineStream(["INF starting\n", "ERR failed to connect\n"]))

    result = discover_tunnel_hostname(handle, timeout_seconds=5, fallback="node.example.com")

    assert result.source is DiscoverySource.FALLBACK
    assert result.hostname == "node.example.com"
    assert handle.hostname is None


def test_timeout_falls_back_without_publishing() -> None:
    release = threading.Event()
    handle = TunnelHandle(LineStream(_blocking_lines(release, ["INF waiting\n"])))
    try:
        started = time.monotonic()
        result = discover_tunnel_hostname(handle, timeout_seconds=0.3, fallback="localhost")
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert 0.3 <= elapsed < 0.8
    assert result.source is DiscoverySource.FALLBACK
    assert result.hostname == "localhost"
    assert handle.hostname is None


def test_fixed_hostname_needs_no_output() -> None:
    handle = TunnelHandle.with_fixed_hostname("node.example.com")

    result = discover_tunnel_hostname(handle, timeout_seconds=5, fallback="localhost")

    assert result.source is DiscoverySource.CACHED
    assert result.hostname == "node.example.com"


def test_detached_output_falls_back_immediately() -> None:
    result = discover_tunnel_hostname(TunnelHandle(), timeout_seconds=5, fallback="localhost")

    assert result.source is DiscoverySource.FALLBACK
    assert result.hostname == "localhost"


def test_hostname_is_written_once() -> None:
    handle = TunnelHandle()

    assert handle.publish("first.trycloudflare.com") == "first.trycloudflare.com"
    assert handle.publish("second.trycloudflare.com") == "first.trycloudflare.com"
    assert handle.hostname == "first.trycloudflare.com"


def test_background_discovery_publishes_hostname() -> None:
    handle = TunnelHandle(LineStream(QUICK_TUNNEL_OUTPUT))

    future = start_background_discovery(handle, timeout_seconds=5, fallback="localhost")

    assert future.result(timeout=5).source is DiscoverySource.DISCOVERED
    assert handle.wait_for_hostname(1) == "quiet-fox-amber-12.trycloudflare.com"


def test_output_keeps_draining_after_discovery() -> None:
    consumed: list[str] = []

    def lines() -> Iterator[str]:
        for line in QUICK_TUNNEL_OUTPUT + [f"INF heartbeat {n}\n" for n in range(50)]:
            consumed.append(line)
            yield line

    stream = LineStream(lines(), max_buffered=4)
    handle = TunnelHandle(stream)
    discover_tunnel_hostname(handle, timeout_seconds=5, fallback="localhost")

    leftover = list(stream.read_until(time.monotonic() + 5, time.monotonic))

    assert len(leftover) <= 1
    assert len(consumed) == len(QUICK_TUNNEL_OUTPUT) + 50


def test_background_discovery_resolves_fallback_at_timeout() -> None:
    release = threading.Event()
    handle = TunnelHandle(LineStream(_blocking_lines(release, [])))
    try:
        started = time.monotonic()
        future = start_background_discovery(handle, timeout_seconds=0.3, fallback="localhost")
        result = future.result(timeout=5)
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert 0.3 <= elapsed < 0.8
    assert result.source is DiscoverySource.FALLBACK
