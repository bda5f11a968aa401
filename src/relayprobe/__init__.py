r"""relayprobe -- Nostr relay probe and diagnostics engine.

Opens ephemeral WebSocket connections to Nostr relays to measure their
health and protocol compliance, correlate publish acknowledgements, drive
concurrent load tests and stream the activity of a long-lived connection.

Imports flow strictly downward:

```text
               probes          Health, compliance, publish, stress, monitor
             /   |   \
          core  nips  utils    Config/logging, NIP-01/NIP-11, transport
             \   |   /
              models           Relay URLs, session log, result values
```

Attributes:
    models: Relay URL validation, session log, frozen result models.
    core: Configuration, exceptions, structured logging, YAML loading.
    nips: NIP-01 frames and NIP-11 relay information fetch.
    utils: WebSocket [ConnectionSession][relayprobe.utils.transport.ConnectionSession],
        bounded HTTP reads, signing keys.
    probes: The probe operations.

Note:
    Top-level imports (``from relayprobe import HealthProbe``) use lazy
    loading and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("relayprobe")

__all__ = [
    "ComplianceResult",
    "ComplianceTester",
    "ConnectionSession",
    "HealthCheckResult",
    "HealthProbe",
    "Logger",
    "Nip11InfoMetadata",
    "PingResult",
    "ProbeConfig",
    "PublishCoordinator",
    "PublishResult",
    "Relay",
    "RelayMonitor",
    "StressRunner",
    "StressTestResult",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Logger": ("relayprobe.core", "Logger"),
    "ProbeConfig": ("relayprobe.core", "ProbeConfig"),
    "ComplianceResult": ("relayprobe.models", "ComplianceResult"),
    "HealthCheckResult": ("relayprobe.models", "HealthCheckResult"),
    "PingResult": ("relayprobe.models", "PingResult"),
    "PublishResult": ("relayprobe.models", "PublishResult"),
    "Relay": ("relayprobe.models", "Relay"),
    "StressTestResult": ("relayprobe.models", "StressTestResult"),
    "Nip11InfoMetadata": ("relayprobe.nips", "Nip11InfoMetadata"),
    "ConnectionSession": ("relayprobe.utils", "ConnectionSession"),
    "ComplianceTester": ("relayprobe.probes", "ComplianceTester"),
    "HealthProbe": ("relayprobe.probes", "HealthProbe"),
    "PublishCoordinator": ("relayprobe.probes", "PublishCoordinator"),
    "RelayMonitor": ("relayprobe.probes", "RelayMonitor"),
    "StressRunner": ("relayprobe.probes", "StressRunner"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'relayprobe' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
