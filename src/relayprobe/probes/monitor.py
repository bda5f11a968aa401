"""
Long-lived relay monitoring.

[RelayMonitor][relayprobe.probes.monitor.RelayMonitor] keeps one
connection to a relay open in a background task, forwards every state
transition to ``on_status_change`` and streams the session's activity log
to ``on_log`` in arrival order, draining it every ``monitor.poll_interval``
seconds (100 ms by default).

Monitoring ends when the relay closes the connection or when the caller
cancels. The cancel coroutine is idempotent, and once it has returned no
callback fires again.

Examples:
    ```python
    monitor = RelayMonitor("wss://nos.lol", on_log=print, on_status_change=print)
    cancel = monitor.start()
    await asyncio.sleep(30)
    await cancel()

    # or
    async with RelayMonitor("wss://nos.lol", on_log=print, on_status_change=print) as monitor:
        await monitor.wait_closed()
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, Self

from relayprobe.core.exceptions import ConnectivityError

from .base import BaseProbe


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    from relayprobe.core.config import ProbeConfig
    from relayprobe.models.constants import ConnectionState
    from relayprobe.models.log import LogEntry
    from relayprobe.utils.transport import ConnectionSession


class RelayMonitor(BaseProbe):
    """Streams the activity and status of one relay connection.

    Args:
        url: Relay WebSocket URL.
        on_log: Called with each [LogEntry][relayprobe.models.log.LogEntry].
        on_status_change: Called with each new
            [ConnectionState][relayprobe.models.constants.ConnectionState].
        config: Optional probe configuration.

    Note:
        A connect failure is reported through both callbacks (the
        ``connecting -> error`` transition and the session's error entry)
        and ends monitoring.
    """

    LOGGER_NAME = "relayprobe.monitor"

    def __init__(
        self,
        url: str,
        on_log: Callable[[LogEntry], None],
        on_status_change: Callable[[ConnectionState], None],
        config: ProbeConfig | None = None,
    ) -> None:
        super().__init__(config)
        self._url = url
        self._on_log = on_log
        self._on_status_change = on_status_change

        self._conn: ConnectionSession | None = None
        self._task: asyncio.Task[None] | None = None
        self._shutdown_task: asyncio.Task[None] | None = None
        self._transport_closed = asyncio.Event()
        self._cancelled = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def session(self) -> ConnectionSession | None:
        """The monitored session, once ``start()`` has run; exposes counters."""
        return self._conn

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> Callable[[], Awaitable[None]]:
        """Start monitoring in a background task.

        Returns:
            The cancel coroutine function (same as ``cancel``).

        Raises:
            RuntimeError: If the monitor was already started.
        """
        if self._task is not None or self._cancelled:
            raise RuntimeError(f"Monitor already started: {self._url}")
        self._task = asyncio.create_task(self._run(), name=f"monitor:{self._url}")
        self._logger.info("monitor_started", url=self._url)
        return self.cancel

    async def cancel(self) -> None:
        """Force-close the session and stop polling.

        Idempotent; concurrent callers all wait for the same shutdown.
        """
        if self._shutdown_task is None:
            self._shutdown_task = asyncio.create_task(self._shutdown())
        await asyncio.shield(self._shutdown_task)

    async def wait_closed(self) -> None:
        """Wait until monitoring ends (relay closed the connection or cancel)."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.cancel()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _shutdown(self) -> None:
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
        self._cancelled = True
        self._logger.info("monitor_stopped", url=self._url)

    async def _run(self) -> None:
        session = self._session(self._url)
        self._conn = session
        session.on_state_change(self._forward_status)
        session.on_close(self._transport_closed.set)
        try:
            try:
                await session.open(self._config.timeouts.connect)
            except ConnectivityError as e:
                self._logger.info("monitor_connect_failed", url=self._url, error=str(e))
                return

            interval = self._config.monitor.poll_interval
            while not self._transport_closed.is_set():
                self._drain(session)
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(self._transport_closed.wait(), timeout=interval)
            self._logger.info("monitor_transport_closed", url=self._url)
        finally:
            await session.close()
            self._drain(session)

    def _drain(self, session: ConnectionSession) -> None:
        for entry in session.log.drain():
            if self._cancelled:
                return
            try:
                self._on_log(entry)
            except Exception:
                self._logger.exception("on_log_failed", url=self._url)

    def _forward_status(self, state: ConnectionState) -> None:
        if not self._cancelled:
            self._on_status_change(state)
