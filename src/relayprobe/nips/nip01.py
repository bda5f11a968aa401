"""
NIP-01 wire frames used by the probes.

Only the handful of frames the engine needs are covered: the client-side
``REQ``, ``CLOSE`` and ``EVENT`` builders and a tolerant parser for the
relay's ``OK`` acknowledgement. Filters, event storage and replay are not
implemented.

```text
["REQ",   <subscription id>, <filter>]
["CLOSE", <subscription id>]
["EVENT", <event>]
["OK",    <event id>, <true|false>, <message>]      (inbound)
```

See Also:
    [NIP-01](https://github.com/nostr-protocol/nips/blob/master/01.md):
        Basic protocol flow description.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, NamedTuple

from relayprobe.core.exceptions import ProtocolError
from relayprobe.models.constants import FrameType


logger = logging.getLogger(__name__)

Frame = list[Any]

_OK_FRAME_MIN_LEN = 3


class OkFrame(NamedTuple):
    """Decoded ``["OK", event_id, accepted, message]`` frame."""

    event_id: str
    accepted: bool
    message: str


def subscription_id(prefix: str = "probe") -> str:
    """Return a fresh, unique subscription id such as ``health_check_3f9a...``."""
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


def req_frame(sub_id: str, filter_: dict[str, Any] | None = None) -> Frame:
    """Build a ``REQ`` frame; the default filter asks for a single event."""
    return [FrameType.REQ.value, sub_id, filter_ if filter_ is not None else {"limit": 1}]


def close_frame(sub_id: str) -> Frame:
    return [FrameType.CLOSE.value, sub_id]


def event_frame(event: dict[str, Any]) -> Frame:
    """Build an ``EVENT`` frame for an already-signed event.

    Raises:
        ValueError: If the event has no string ``id``.
    """
    if not isinstance(event.get("id"), str):
        raise ValueError("event must carry a string 'id'")
    return [FrameType.EVENT.value, event]


def _decode_ok(raw: str | bytes) -> OkFrame:
    try:
        frame = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"not JSON: {e}") from e

    if not isinstance(frame, list) or not frame or frame[0] != FrameType.OK.value:
        raise ProtocolError("not an OK frame")
    if len(frame) < _OK_FRAME_MIN_LEN or not isinstance(frame[1], str):
        raise ProtocolError(f"malformed OK frame: {frame!r}")

    message = frame[3] if len(frame) > _OK_FRAME_MIN_LEN else ""
    return OkFrame(
        event_id=frame[1],
        accepted=bool(frame[2]),
        message=message if isinstance(message, str) else str(message),
    )


def parse_ok_frame(raw: str | bytes) -> OkFrame | None:
    """Decode an inbound ``OK`` frame.

    Non-JSON payloads and frames of any other type are expected relay
    chatter and return ``None`` instead of raising.

    Args:
        raw: Text (or bytes) payload of a WebSocket message.

    Returns:
        The decoded [OkFrame][relayprobe.nips.nip01.OkFrame], or ``None``.
    """
    try:
        return _decode_ok(raw)
    except ProtocolError as e:
        logger.debug("frame_ignored reason=%s", e)
        return None
