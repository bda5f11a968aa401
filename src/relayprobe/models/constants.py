"""Shared constants for the models layer.

Enumerations and default values used across the transport, NIP and probe
layers. Kept here so that lower layers never import from higher ones.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Final


DEFAULT_CONNECT_TIMEOUT: Final[float] = 5.0
DEFAULT_HEALTH_TIMEOUT: Final[float] = 5.0
DEFAULT_READ_WAIT: Final[float] = 1.0
DEFAULT_PUBLISH_TIMEOUT: Final[float] = 10.0
DEFAULT_INFO_TIMEOUT: Final[float] = 10.0
DEFAULT_CLOSE_TIMEOUT: Final[float] = 5.0
DEFAULT_STRESS_MAX_HOLD: Final[float] = 1.0
DEFAULT_MONITOR_POLL_INTERVAL: Final[float] = 0.1

COMPLIANCE_TRIALS: Final[int] = 3


class NetworkType(StrEnum):
    """Network type of a relay host.

    Overlay networks are detected from their TLD and are reached through a
    SOCKS5 proxy; everything else is ``CLEARNET`` or ``LOCAL``.

    Examples:
        ```python
        detect_network("relay.damus.io")   # NetworkType.CLEARNET
        detect_network("abc123.onion")     # NetworkType.TOR
        detect_network("127.0.0.1")        # NetworkType.LOCAL
        ```
    """

    CLEARNET = "clearnet"
    TOR = "tor"
    I2P = "i2p"
    LOKI = "loki"
    LOCAL = "local"
    UNKNOWN = "unknown"


OVERLAY_NETWORKS: Final[frozenset[NetworkType]] = frozenset(
    {NetworkType.TOR, NetworkType.I2P, NetworkType.LOKI}
)


class ConnectionState(StrEnum):
    """Lifecycle state of a [ConnectionSession][relayprobe.utils.transport.ConnectionSession].

    Attributes:
        DISCONNECTED: Not opened yet, or closed (terminal after ``close()``).
        CONNECTING: ``open()`` is in progress.
        CONNECTED: The WebSocket handshake completed.
        ERROR: The connection failed or the transport reported an error.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class LogKind(StrEnum):
    """Category of a session log entry."""

    SENT = "sent"
    RECEIVED = "received"
    ERROR = "error"
    INFO = "info"


class FrameType(StrEnum):
    """Leading label of the NIP-01 frames the engine speaks."""

    REQ = "REQ"
    CLOSE = "CLOSE"
    EVENT = "EVENT"
    OK = "OK"


class Nip(IntEnum):
    """NIP numbers used for compliance scoring."""

    BASIC_PROTOCOL = 1
    AUTHENTICATION = 42
    EVENT_COUNTS = 45
