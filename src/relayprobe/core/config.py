"""
Pydantic configuration for the probe engine.

Groups every tunable of the engine into small nested models with sensible
defaults, so a YAML file only needs to list the values it overrides:

```yaml
timeouts:
  connect: 3.0
  publish: 15.0
transport:
  allow_insecure: true
networks:
  tor:
    proxy_url: socks5://127.0.0.1:9050
```

See Also:
    [load_yaml][relayprobe.core.yaml.load_yaml]: Safe YAML loader used by
        [ProbeConfig.from_yaml()][relayprobe.core.config.ProbeConfig.from_yaml].
    [relayprobe.models.constants][relayprobe.models.constants]: The default
        values mirrored by these models.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import BaseModel, Field, ValidationError

from relayprobe.models.constants import (
    DEFAULT_CLOSE_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HEALTH_TIMEOUT,
    DEFAULT_INFO_TIMEOUT,
    DEFAULT_MONITOR_POLL_INTERVAL,
    DEFAULT_PUBLISH_TIMEOUT,
    DEFAULT_READ_WAIT,
    DEFAULT_STRESS_MAX_HOLD,
    NetworkType,
)
from relayprobe.models.relay import Relay

from .exceptions import ConfigurationError
from .yaml import load_yaml


class TimeoutsConfig(BaseModel):
    """Operation timeouts (in seconds)."""

    connect: float = Field(
        default=DEFAULT_CONNECT_TIMEOUT, gt=0.0, description="WebSocket open timeout"
    )
    health: float = Field(
        default=DEFAULT_HEALTH_TIMEOUT, gt=0.0, description="Health check connect timeout"
    )
    read_wait: float = Field(
        default=DEFAULT_READ_WAIT,
        ge=0.0,
        description="Wait between the test subscription and its CLOSE",
    )
    publish: float = Field(
        default=DEFAULT_PUBLISH_TIMEOUT, gt=0.0, description="Deadline for the OK frame"
    )
    info: float = Field(default=DEFAULT_INFO_TIMEOUT, gt=0.0, description="NIP-11 HTTP timeout")
    close: float = Field(
        default=DEFAULT_CLOSE_TIMEOUT, gt=0.0, description="WebSocket close timeout"
    )


class StressConfig(BaseModel):
    """Stress run settings.

    Attributes:
        max_hold: Upper bound of the uniform random time (seconds) each
            successful connection is held open before closing.
    """

    max_hold: float = Field(default=DEFAULT_STRESS_MAX_HOLD, ge=0.0)


class MonitorConfig(BaseModel):
    """Relay monitor settings."""

    poll_interval: float = Field(
        default=DEFAULT_MONITOR_POLL_INTERVAL,
        gt=0.0,
        le=60.0,
        description="Seconds between session log drains",
    )


class TransportConfig(BaseModel):
    """WebSocket and HTTP transport settings.

    Attributes:
        allow_insecure: Accept invalid TLS certificates. WebSocket sessions
            skip verification entirely; NIP-11 fetches verify first and fall
            back to an unverified context on certificate errors.
        info_max_size: Maximum NIP-11 response body size in bytes.
    """

    allow_insecure: bool = False
    info_max_size: int = Field(default=65_536, ge=1024, le=10_485_760)


class ProxyConfig(BaseModel):
    """SOCKS5 proxy for one overlay network (``None`` disables it)."""

    proxy_url: str | None = None


class NetworksConfig(BaseModel):
    """Per-overlay-network proxy settings.

    Examples:
        ```python
        config = NetworksConfig(tor=ProxyConfig(proxy_url="socks5://127.0.0.1:9050"))
        config.get_proxy_url(NetworkType.TOR)       # 'socks5://127.0.0.1:9050'
        config.get_proxy_url(NetworkType.CLEARNET)  # None
        ```
    """

    tor: ProxyConfig = Field(
        default_factory=lambda: ProxyConfig(proxy_url="socks5://127.0.0.1:9050")
    )
    i2p: ProxyConfig = Field(
        default_factory=lambda: ProxyConfig(proxy_url="socks5://127.0.0.1:4447")
    )
    loki: ProxyConfig = Field(default_factory=ProxyConfig)

    def get_proxy_url(self, network: NetworkType) -> str | None:
        """Return the SOCKS5 proxy URL for *network*, or ``None`` for direct connections."""
        config = getattr(self, network.value, None)
        if not isinstance(config, ProxyConfig):
            return None
        return config.proxy_url


class ProbeConfig(BaseModel):
    """Top-level configuration of the probe engine.

    Every probe component accepts an optional ``ProbeConfig``; omitting it
    uses the defaults.

    See Also:
        [TimeoutsConfig][relayprobe.core.config.TimeoutsConfig],
        [StressConfig][relayprobe.core.config.StressConfig],
        [MonitorConfig][relayprobe.core.config.MonitorConfig],
        [TransportConfig][relayprobe.core.config.TransportConfig],
        [NetworksConfig][relayprobe.core.config.NetworksConfig]: The nested
            sections.
    """

    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    stress: StressConfig = Field(default_factory=StressConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    networks: NetworksConfig = Field(default_factory=NetworksConfig)

    def proxy_for(self, url: str) -> str | None:
        """Select the SOCKS5 proxy for a relay URL from its host's network type.

        Returns ``None`` for clearnet and local hosts, and for URLs that
        cannot be parsed (the connection attempt reports those).
        """
        try:
            relay = Relay(url)
        except ValueError:
            return None
        if not relay.is_overlay:
            return None
        return self.networks.get_proxy_url(relay.network)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Validate a configuration dictionary.

        Raises:
            ConfigurationError: If any value fails validation.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> Self:
        """Load and validate a YAML configuration file.

        Raises:
            ConfigurationError: If the file is missing, is not valid YAML,
                is not a mapping, or contains invalid values.
        """
        try:
            data = load_yaml(config_path)
        except (OSError, yaml.YAMLError, ValueError) as e:
            raise ConfigurationError(f"Cannot load config {config_path}: {e}") from e
        return cls.from_dict(data)
