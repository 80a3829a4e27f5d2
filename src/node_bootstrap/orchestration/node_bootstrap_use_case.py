"""Node bootstrap use-case service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from node_bootstrap.artifact_catalog import (
    ArtifactRole,
    UnsupportedArchitectureError,
    artifact_filename,
    select_artifacts,
)
from node_bootstrap.artifact_delivery import (
    ArtifactFetcher,
    ArtifactPermissionError,
    DownloadError,
    install_artifacts,
)
from node_bootstrap.artifact_delivery.artifact_fetcher import HttpSession
from node_bootstrap.configuration.runtime_settings import MonitoringMode, RuntimeConfig
from node_bootstrap.daemon_configuration import (
    TunnelCredentialError,
    TunnelMode,
    monitoring_command,
    proxy_core_command,
    tunnel_command,
    tunnel_mode,
    write_monitoring_config,
    write_proxy_core_config,
    write_tunnel_credentials,
)
from node_bootstrap.process_launch import (
    DaemonHandle,
    DaemonLauncher,
    DaemonSpec,
    DaemonStartError,
    GracePeriodLiveness,
    PollingLiveness,
    tcp_port_probe,
)
from node_bootstrap.process_launch.liveness import Probe
from node_bootstrap.tunnel_discovery import LineStream, TunnelHandle, start_background_discovery
from node_bootstrap.workspace import WorkspaceError, WorkspaceLayout, prepare_workspace

from .bootstrap_contracts import BootstrapError, BootstrapOutcome, BootstrapPhase

LOGGER = logging.getLogger(__name__)

ProbeFactory = Callable[[str, int], Probe]

_FATAL_ERRORS = (
    UnsupportedArchitectureError,
    WorkspaceError,
    TunnelCredentialError,
    DownloadError,
    ArtifactPermissionError,
    DaemonStartError,
    OSError,
)


def run_node_bootstrap(
    config: RuntimeConfig,
    *,
    session: HttpSession | None = None,
    launcher: DaemonLauncher | None = None,
    probe_factory: ProbeFactory | None = None,
) -> BootstrapOutcome:
    """Fetch, install and start every daemon in order, then begin hostname discovery.

    Daemons already running when a later fatal phase fails are terminated before the
    `BootstrapError` propagates.
    """
    resolved_launcher = launcher or DaemonLauncher()
    resolved_probe_factory = probe_factory or tcp_port_probe
    started: list[DaemonHandle] = []
    try:
        return _bootstrap(
            config,
            session=session,
            launcher=resolved_launcher,
            probe_factory=resolved_probe_factory,
            started=started,
        )
    except BootstrapError:
        _terminate_started(started)
        raise


def _bootstrap(
    config: RuntimeConfig,
    *,
    session: HttpSession | None,
    launcher: DaemonLauncher,
    probe_factory: ProbeFactory,
    started: list[DaemonHandle],
) -> BootstrapOutcome:
    with _phase(BootstrapPhase.ARTIFACT_SELECTION):
        specs = select_artifacts(config)
    with _phase(BootstrapPhase.WORKSPACE):
        layout = prepare_workspace(config.file_root)
    with _phase(BootstrapPhase.DAEMON_CONFIGURATION):
        mode = _write_daemon_configuration(config, layout)
    with _phase(BootstrapPhase.DOWNLOAD):
        with ArtifactFetcher(
            layout.root, session=session, timeout_seconds=config.download_timeout_seconds
        ) as fetcher:
            fetched = fetcher.fetch(specs)
    with _phase(BootstrapPhase.INSTALL):
        installed = install_artifacts(fetched)

    daemons: list[DaemonHandle] = []
    monitoring = _launch_monitoring(config, layout, launcher)
    if monitoring is not None:
        daemons.append(monitoring)
        if monitoring.is_running:
            started.append(monitoring)

    with _phase(BootstrapPhase.PROXY_CORE):
        proxy_core = launcher.launch(
            DaemonSpec(
                name=ArtifactRole.PROXY_CORE.value,
                argv=proxy_core_command(layout, artifact_filename(ArtifactRole.PROXY_CORE)),
                liveness=PollingLiveness(
                    probe_factory("127.0.0.1", config.proxy.listen_port),
                    timeout_seconds=config.launch.liveness_timeout_seconds,
                    description=f"port {config.proxy.listen_port} accepting connections",
                ),
                cwd=layout.root,
            )
        )
    daemons.append(proxy_core)
    started.append(proxy_core)

    with _phase(BootstrapPhase.TUNNEL):
        tunnel_daemon = launcher.launch(
            DaemonSpec(
                name=ArtifactRole.RELAY.value,
                argv=tunnel_command(config, layout, artifact_filename(ArtifactRole.RELAY), mode),
                liveness=GracePeriodLiveness(config.launch.grace_seconds),
                attach_output=mode is TunnelMode.QUICK,
                cwd=layout.root,
            )
        )
    daemons.append(tunnel_daemon)
    started.append(tunnel_daemon)

    tunnel = _tunnel_handle(config, tunnel_daemon, mode)
    discovery = start_background_discovery(
        tunnel,
        timeout_seconds=config.tunnel.discovery_timeout_seconds,
        fallback=config.tunnel.fallback_hostname,
    )
    return BootstrapOutcome(
        artifacts=installed,
        daemons=tuple(daemons),
        tunnel=tunnel,
        discovery=discovery,
    )


@contextmanager
def _phase(phase: BootstrapPhase) -> Iterator[None]:
    LOGGER.info("Starting %s", phase.value)
    try:
        yield
    except _FATAL_ERRORS as exc:
        LOGGER.debug("%s failed: %s", phase.value, exc)
        raise BootstrapError(phase, exc) from exc


def _write_daemon_configuration(config: RuntimeConfig, layout: WorkspaceLayout) -> TunnelMode:
    write_proxy_core_config(config, layout.proxy_config)
    if config.monitoring.mode is MonitoringMode.LEGACY:
        write_monitoring_config(config, layout.monitoring_config)
    mode = tunnel_mode(config)
    if mode is TunnelMode.CREDENTIALS_FILE:
        write_tunnel_credentials(
            config,
            credentials_path=layout.tunnel_credentials,
            config_path=layout.tunnel_config,
        )
    LOGGER.info("Tunnel mode: %s", mode.value)
    return mode


def _launch_monitoring(
    config: RuntimeConfig, layout: WorkspaceLayout, launcher: DaemonLauncher
) -> DaemonHandle | None:
    mode = config.monitoring.mode
    if mode is None:
        return None
    role = (
        ArtifactRole.MONITOR_AGENT if mode is MonitoringMode.AGENT else ArtifactRole.MONITOR_LEGACY
    )
    spec = DaemonSpec(
        name=role.value,
        argv=monitoring_command(config, layout, artifact_filename(role)),
        liveness=GracePeriodLiveness(config.launch.grace_seconds),
        cwd=layout.root,
    )
    try:
        return launcher.launch(spec)
    except DaemonStartError as exc:
        LOGGER.warning("Monitoring is unavailable, continuing without it: %s", exc)
        return exc.handle


def _tunnel_handle(config: RuntimeConfig, daemon: DaemonHandle, mode: TunnelMode) -> TunnelHandle:
    fixed_hostname = config.tunnel.fixed_hostname
    if fixed_hostname is not None:
        return TunnelHandle.with_fixed_hostname(fixed_hostname)
    if mode is TunnelMode.QUICK:
        return TunnelHandle(LineStream(daemon.output))
    return TunnelHandle()


def _terminate_started(started: list[DaemonHandle]) -> None:
    for handle in reversed(started):
        try:
            handle.terminate()
        except OSError as exc:
            LOGGER.warning("Could not terminate %s: %s", handle.name, exc)
