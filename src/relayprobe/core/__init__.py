"""Core layer: logging, exceptions, YAML loading and configuration.

Depends only on [relayprobe.models][relayprobe.models] and is used by every
higher layer.

Attributes:
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][relayprobe.core.logger.Logger].
    ProbeConfig: Pydantic configuration with timeouts, stress, monitor,
        transport and per-network proxy settings.
        See [ProbeConfig][relayprobe.core.config.ProbeConfig].
    RelayProbeError: Root of the exception hierarchy.
        See [relayprobe.core.exceptions][relayprobe.core.exceptions].
    YAML: Safe YAML loading with ``yaml.safe_load()``.
        See [load_yaml()][relayprobe.core.yaml.load_yaml].
"""

from .config import (
    MonitorConfig,
    NetworksConfig,
    ProbeConfig,
    ProxyConfig,
    StressConfig,
    TimeoutsConfig,
    TransportConfig,
)
from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    ProtocolError,
    PublishingError,
    RelayProbeError,
    RelayTimeoutError,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs
from .yaml import load_yaml


__all__ = [
    "ConfigurationError",
    "ConnectivityError",
    "Logger",
    "MonitorConfig",
    "NetworksConfig",
    "ProbeConfig",
    "ProtocolError",
    "ProxyConfig",
    "PublishingError",
    "RelayProbeError",
    "RelayTimeoutError",
    "StressConfig",
    "StructuredFormatter",
    "TimeoutsConfig",
    "TransportConfig",
    "format_kv_pairs",
    "load_yaml",
]
