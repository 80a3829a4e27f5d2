"""Discover a hostname printed by a real child process."""

from __future__ import annotations

import sys

from node_bootstrap.process_launch import DaemonLauncher, DaemonSpec, GracePeriodLiveness
from node_bootstrap.tunnel_discovery import (
    DiscoverySource,
    LineStream,
    TunnelHandle,
    start_background_discovery,
)

FAKE_TUNNEL = """
import sys, time
print("INF Requesting new quick Tunnel on trycloudflare.com...", flush=True)
time.sleep(0.5)
print("INF |  https://brisk-owl-42.trycloudflare.com  |", file=sys.stderr, flush=True)
time.sleep(30)
"""


def test_hostname_printed_after_startup_is_discovered() -> None:
    spec = DaemonSpec(
        "relay",
        (sys.executable, "-c", FAKE_TUNNEL),
        GracePeriodLiveness(0.2),
        attach_output=True,
    )
    daemon = DaemonLauncher().launch(spec)
    try:
        handle = TunnelHandle(LineStream(daemon.output))
        future = start_background_discovery(handle, timeout_seconds=10, fallback="localhost")

        result = future.result(timeout=15)
    finally:
        daemon.terminate(timeout_seconds=2.0)

    assert result.source is DiscoverySource.DISCOVERED
    assert result.hostname == "brisk-owl-42.trycloudflare.com"
    assert handle.hostname == "brisk-owl-42.trycloudflare.com"
