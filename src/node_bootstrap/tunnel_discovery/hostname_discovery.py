"""Bounded discovery of the hostname a quick tunnel was assigned."""

from __future__ import annotations

import logging
import re
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future

from .tunnel_models import DiscoveryResult, DiscoverySource, TunnelHandle

LOGGER = logging.getLogger(__name__)

QUICK_TUNNEL_PATTERN = re.compile(r"https://([a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.trycloudflare\.com)")


def discover_tunnel_hostname(
    handle: TunnelHandle,
    *,
    timeout_seconds: float,
    fallback: str,
    pattern: re.Pattern[str] = QUICK_TUNNEL_PATTERN,
    clock: Callable[[], float] = time.monotonic,
) -> DiscoveryResult:
    """Scan tunnel output for its hostname, resolving to `fallback` once the timeout elapses.

    A hostname that is already known (discovered earlier, or fixed by configuration) is
    returned without reading any output.
    """
    cached = handle.hostname
    if cached is not None:
        return DiscoveryResult(hostname=cached, source=DiscoverySource.CACHED)
    if handle.output is None:
        LOGGER.warning("Tunnel output is not attached; using fallback hostname %s", fallback)
        return DiscoveryResult(hostname=fallback, source=DiscoverySource.FALLBACK)

    deadline = clock() + timeout_seconds
    for line in handle.output.read_until(deadline, clock):
        match = pattern.search(line)
        if match is None:
            continue
        hostname = handle.publish(match.group(1))
        handle.output.stop_buffering()
        return DiscoveryResult(hostname=hostname, source=DiscoverySource.DISCOVERED)

    LOGGER.warning(
        "Tunnel hostname not seen within %gs; using fallback hostname %s",
        timeout_seconds,
        fallback,
    )
    return DiscoveryResult(hostname=fallback, source=DiscoverySource.FALLBACK)


def start_background_discovery(
    handle: TunnelHandle,
    *,
    timeout_seconds: float,
    fallback: str,
    pattern: re.Pattern[str] = QUICK_TUNNEL_PATTERN,
) -> Future[DiscoveryResult]:
    """Run discovery on a daemon thread so startup can continue without waiting."""
    future: Future[DiscoveryResult] = Future()

    def run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = discover_tunnel_hostname(
                handle, timeout_seconds=timeout_seconds, fallback=fallback, pattern=pattern
            )
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Tunnel hostname discovery failed")
            future.set_exception(exc)
            return
        future.set_result(result)

    threading.Thread(target=run, name="tunnel-discovery", daemon=True).start()
    return future
