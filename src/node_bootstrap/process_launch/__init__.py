"""Process launch exports."""

from .daemon_launcher import DaemonLauncher, DaemonStartError
from .daemon_models import (
    DaemonHandle,
    DaemonSpec,
    DaemonState,
    InvalidDaemonTransition,
    LivenessCheck,
    ProcessLike,
)
from .liveness import GracePeriodLiveness, PollingLiveness, tcp_port_probe

__all__ = [
    "DaemonHandle",
    "DaemonLauncher",
    "DaemonSpec",
    "DaemonStartError",
    "DaemonState",
    "GracePeriodLiveness",
    "InvalidDaemonTransition",
    "LivenessCheck",
    "PollingLiveness",
    "ProcessLike",
    "tcp_port_probe",
]
