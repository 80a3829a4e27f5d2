"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import ConfigurationError, load_configuration
from .runtime_settings import (
    LaunchSettings,
    MonitoringMode,
    MonitoringSettings,
    NodeSettings,
    ProxySettings,
    RuntimeConfig,
    SubscriptionSettings,
    TunnelSettings,
)

__all__ = [
    "RuntimeConfig",
    "NodeSettings",
    "ProxySettings",
    "MonitoringMode",
    "MonitoringSettings",
    "TunnelSettings",
    "SubscriptionSettings",
    "LaunchSettings",
    "ConfigurationError",
    "load_configuration",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
