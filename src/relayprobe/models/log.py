"""
Per-session activity log.

Every [ConnectionSession][relayprobe.utils.transport.ConnectionSession]
owns one [SessionLog][relayprobe.models.log.SessionLog] and appends one
[LogEntry][relayprobe.models.log.LogEntry] for each frame sent, frame
received, error and state transition. The log is unbounded until a
consumer (the [RelayMonitor][relayprobe.probes.monitor.RelayMonitor])
drains it.

Note:
    ``drain()`` swaps the underlying deque for a fresh one in a single
    step, so entries appended while the consumer iterates a drained batch
    land in the next batch and are never lost or delivered twice.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .constants import LogKind


if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One entry of a session activity log.

    Attributes:
        timestamp: Wall-clock time of the event (Unix seconds, float).
        kind: Category of the entry ([LogKind][relayprobe.models.constants.LogKind]).
        message: Short human-readable description.
        data: Optional payload (the frame that was sent or received, an
            error string, or the new state).
    """

    kind: LogKind
    message: str
    data: Any = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "timestamp": self.timestamp,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result


class SessionLog:
    """Ordered, single-consumer queue of [LogEntry][relayprobe.models.log.LogEntry].

    Examples:
        ```python
        log = SessionLog()
        log.append(LogKind.INFO, "state_changed", "connecting")
        batch = log.drain()   # [LogEntry(...)]
        len(log)              # 0
        ```
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: deque[LogEntry] = deque()

    def append(self, kind: LogKind, message: str, data: Any = None) -> LogEntry:
        """Append a new entry and return it."""
        entry = LogEntry(kind=kind, message=message, data=data)
        self._entries.append(entry)
        return entry

    def drain(self) -> list[LogEntry]:
        """Remove and return every pending entry in arrival order."""
        entries, self._entries = self._entries, deque()
        return list(entries)

    def snapshot(self) -> list[LogEntry]:
        """Return a copy of the pending entries without removing them."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self.snapshot())
