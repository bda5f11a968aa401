"""Pure models with zero I/O: relay URLs, session logs and probe results.

The models layer is the bottom of the package. It depends only on the
standard library, ``rfc3986`` (URL validation) and ``pydantic`` (result
models), never on any other relayprobe package.

Attributes:
    Relay: Validated ``ws``/``wss`` relay URL with
        [NetworkType][relayprobe.models.constants.NetworkType] detection.
    SessionLog: Ordered activity log owned by a connection session.
    HealthCheckResult, PingResult, ComplianceResult, PublishResult,
        StressTestResult: Frozen result values of the probe operations.

See Also:
    [relayprobe.models.constants][]: Shared enums and default values.
    [relayprobe.nips][]: NIP-01 frames and NIP-11 metadata (with I/O).
"""

from .constants import (
    COMPLIANCE_TRIALS,
    ConnectionState,
    FrameType,
    LogKind,
    NetworkType,
    Nip,
)
from .log import LogEntry, SessionLog
from .relay import Relay, detect_network
from .results import (
    ComplianceResult,
    HealthCheckResult,
    PingResult,
    PublishResult,
    StressTestResult,
)


__all__ = [
    "COMPLIANCE_TRIALS",
    "ComplianceResult",
    "ConnectionState",
    "FrameType",
    "HealthCheckResult",
    "LogEntry",
    "LogKind",
    "NetworkType",
    "Nip",
    "PingResult",
    "PublishResult",
    "Relay",
    "SessionLog",
    "StressTestResult",
    "detect_network",
]
