"""relayprobe exception hierarchy.

Typed exceptions for every failure category the probe engine knows about.
Session primitives raise them; the probe operations catch them at their
boundary and fold them into result values, so callers of the public
operations never see them. ``asyncio.CancelledError`` is never wrapped.

Exception hierarchy:

```text
RelayProbeError (base -- never raised directly)
├── ConfigurationError      -- config validation, bad YAML
├── ConnectivityError       -- relay unreachable, send on a closed session
│   └── RelayTimeoutError   -- connection did not open in time
├── ProtocolError           -- malformed or unexpected wire frame
└── PublishingError         -- event was not acknowledged by a relay
```

See Also:
    [ConnectionSession][relayprobe.utils.transport.ConnectionSession]:
        Raises [ConnectivityError][relayprobe.core.exceptions.ConnectivityError]
        and [RelayTimeoutError][relayprobe.core.exceptions.RelayTimeoutError].
    [parse_ok_frame][relayprobe.nips.nip01.parse_ok_frame]: Uses
        [ProtocolError][relayprobe.core.exceptions.ProtocolError] internally
        to reject malformed frames.
"""

from __future__ import annotations


class RelayProbeError(Exception):
    """Base exception for all relayprobe errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(RelayProbeError):
    """Invalid or missing configuration (YAML file, CLI flags).

    See Also:
        [ProbeConfig.from_yaml()][relayprobe.core.config.ProbeConfig.from_yaml]:
            Wraps YAML and validation failures in this exception.
    """


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------


class ConnectivityError(RelayProbeError):
    """Base for all relay/network connectivity errors.

    Raised when the WebSocket cannot be established, when the transport
    fails mid-session, or when a frame is sent on a session that is not
    connected.
    """


class RelayTimeoutError(ConnectivityError):
    """The connection did not reach the connected state before its timeout.

    See Also:
        [ConnectivityError][relayprobe.core.exceptions.ConnectivityError]:
            Parent exception class.
    """


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class ProtocolError(RelayProbeError):
    """A wire frame could not be parsed or has an unexpected shape.

    Malformed inbound frames are expected relay chatter: this error is
    raised and caught inside the frame parser and never ends an operation.
    """


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


class PublishingError(RelayProbeError):
    """An event was rejected or never acknowledged by a relay.

    Publish operations report failures through
    [PublishResult][relayprobe.models.results.PublishResult]; this
    exception is raised by callers (such as the CLI) that want to turn a
    failed result into an error.
    """
