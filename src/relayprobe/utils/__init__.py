"""Utility layer: WebSocket transport, bounded HTTP reads and key handling.

Depends on [relayprobe.models][relayprobe.models] and
[relayprobe.core][relayprobe.core] only.

Attributes:
    ConnectionSession: One observable WebSocket connection to one relay.
        See [ConnectionSession][relayprobe.utils.transport.ConnectionSession].
    read_bounded_json: Size-limited JSON body reader.
    load_keys_from_env, probe_keys, build_probe_event: Signing helpers used
        by the CLI to publish a probe note.
"""

from .http import read_bounded_json
from .keys import ENV_PRIVATE_KEY, build_probe_event, load_keys_from_env, probe_keys
from .transport import ConnectionSession, insecure_ssl_context


__all__ = [
    "ENV_PRIVATE_KEY",
    "ConnectionSession",
    "build_probe_event",
    "insecure_ssl_context",
    "load_keys_from_env",
    "probe_keys",
    "read_bounded_json",
]
