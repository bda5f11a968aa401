"""Nostr Implementation Possibilities: protocol-specific frames and fetches.

Sits between [relayprobe.models][relayprobe.models] /
[relayprobe.utils][relayprobe.utils] and the probes.

Warning:
    [Nip11InfoMetadata.execute()][relayprobe.nips.nip11.info.Nip11InfoMetadata.execute]
    **never raises**. Always check ``logs.success`` on the returned
    metadata.

Attributes:
    nip01: Builders for ``REQ``, ``CLOSE`` and ``EVENT`` frames and a
        tolerant ``OK`` frame parser.
    Nip11InfoMetadata: Fetches and parses NIP-11 documents via HTTP.
    BaseData, BaseLogs: Shared base models.
    FieldKind, parse_fields: Lenient type filtering for relay documents.
"""

from relayprobe.nips.base import BaseData, BaseLogs
from relayprobe.nips.nip01 import (
    OkFrame,
    close_frame,
    event_frame,
    parse_ok_frame,
    req_frame,
    subscription_id,
)
from relayprobe.nips.nip11 import (
    Nip11InfoData,
    Nip11InfoDataLimitation,
    Nip11InfoLogs,
    Nip11InfoMetadata,
)
from relayprobe.nips.parsing import FieldKind, parse_fields


__all__ = [
    "BaseData",
    "BaseLogs",
    "FieldKind",
    "Nip11InfoData",
    "Nip11InfoDataLimitation",
    "Nip11InfoLogs",
    "Nip11InfoMetadata",
    "OkFrame",
    "close_frame",
    "event_frame",
    "parse_fields",
    "parse_ok_frame",
    "req_frame",
    "subscription_id",
]
