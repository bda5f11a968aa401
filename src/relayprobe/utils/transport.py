"""WebSocket transport for relayprobe.

Provides [ConnectionSession][relayprobe.utils.transport.ConnectionSession],
the one primitive every probe is built on: a single duplex connection to a
single relay with an observable lifecycle, per-session counters and an
activity log.

Connections run on ``aiohttp``. Overlay networks (Tor, I2P, Lokinet) are
reached through a SOCKS5 proxy via ``aiohttp_socks.ProxyConnector``;
proxied connections, and connections made with ``allow_insecure=True``,
skip TLS certificate verification.

Note:
    Session primitives raise
    [ConnectivityError][relayprobe.core.exceptions.ConnectivityError] and
    [RelayTimeoutError][relayprobe.core.exceptions.RelayTimeoutError]. The
    probes catch them at their boundary and turn them into result values.

Examples:
    ```python
    session = ConnectionSession("wss://relay.damus.io")
    unregister = session.on_message(print)
    try:
        await session.open(timeout=5.0)
        await session.send(["REQ", "sub1", {"limit": 1}])
        await asyncio.sleep(1.0)
    finally:
        unregister()
        await session.close()
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import ssl
import time
from typing import TYPE_CHECKING, Any, TypeVar

import aiohttp
from aiohttp_socks import ProxyConnector, ProxyError

from relayprobe.core.exceptions import ConnectivityError, RelayTimeoutError
from relayprobe.models.constants import (
    DEFAULT_CLOSE_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    ConnectionState,
    LogKind,
)
from relayprobe.models.log import SessionLog


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)

_H = TypeVar("_H")


def insecure_ssl_context() -> ssl.SSLContext:
    """Return an SSL context that accepts any certificate and hostname."""
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


class ConnectionSession:
    """One duplex connection to one relay endpoint.

    Lifecycle:

    ```text
    disconnected --open()--> connecting --+--> connected --close() or remote close--> disconnected
                                          |       |
                                          |   transport error
                                          |       v
                                          +--> error -----close() or remote close--> disconnected
    ```

    A session is single-use: once ``open()`` has been called it cannot be
    opened again. ``close()`` is idempotent and safe from any state.

    Every frame sent, frame received, transport error and state transition
    appends exactly one [LogEntry][relayprobe.models.log.LogEntry] to
    ``log``.

    Observers are registered with ``on_message``, ``on_close``,
    ``on_error`` and ``on_state_change``. Several observers of the same
    kind may coexist; each registration returns a callable that removes
    it. All observers are dropped when the session closes. An observer
    that raises is logged and does not affect the others.

    Attributes:
        log: The session's [SessionLog][relayprobe.models.log.SessionLog].
        message_count: Frames received.
        error_count: Transport errors recorded.
        last_activity: ``time.monotonic()`` of the last send, receive or
            state change.
    """

    def __init__(
        self,
        url: str,
        *,
        proxy_url: str | None = None,
        allow_insecure: bool = False,
        close_timeout: float = DEFAULT_CLOSE_TIMEOUT,
    ) -> None:
        self._url = url
        self._proxy_url = proxy_url
        self._allow_insecure = allow_insecure
        self._close_timeout = close_timeout

        self._state = ConnectionState.DISCONNECTED
        self._opened = False
        self._closed = False
        self._close_pending = False

        self._http: aiohttp.ClientSession | None = None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader: asyncio.Task[None] | None = None

        self._message_handlers: list[Callable[[str], None]] = []
        self._close_handlers: list[Callable[[], None]] = []
        self._error_handlers: list[Callable[[str], None]] = []
        self._state_handlers: list[Callable[[ConnectionState], None]] = []

        self.log = SessionLog()
        self.message_count = 0
        self.error_count = 0
        self.last_activity = time.monotonic()

    def __repr__(self) -> str:
        return f"ConnectionSession(url={self._url!r}, state={self._state.value})"

    @property
    def url(self) -> str:
        return self._url

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    @staticmethod
    def _register(handlers: list[_H], handler: _H) -> Callable[[], None]:
        handlers.append(handler)

        def unregister() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unregister

    def on_message(self, handler: Callable[[str], None]) -> Callable[[], None]:
        """Call *handler* with the raw text of every received frame."""
        return self._register(self._message_handlers, handler)

    def on_close(self, handler: Callable[[], None]) -> Callable[[], None]:
        """Call *handler* once when a connected session ends, for any reason."""
        return self._register(self._close_handlers, handler)

    def on_error(self, handler: Callable[[str], None]) -> Callable[[], None]:
        """Call *handler* with the error text of every transport error."""
        return self._register(self._error_handlers, handler)

    def on_state_change(self, handler: Callable[[ConnectionState], None]) -> Callable[[], None]:
        """Call *handler* with the new state on every state transition."""
        return self._register(self._state_handlers, handler)

    def _notify(self, handlers: list[Callable[..., None]], *args: Any) -> None:
        for handler in tuple(handlers):
            try:
                handler(*args)
            except Exception:
                logger.exception("observer_failed url=%s", self._url)

    # -------------------------------------------------------------------------
    # State and bookkeeping
    # -------------------------------------------------------------------------

    def _set_state(self, new_state: ConnectionState) -> None:
        if new_state is self._state:
            return
        old_state, self._state = self._state, new_state
        self.last_activity = time.monotonic()
        self.log.append(
            LogKind.INFO, f"state changed: {old_state.value} -> {new_state.value}", new_state.value
        )
        logger.debug(
            "state_changed url=%s from=%s to=%s", self._url, old_state.value, new_state.value
        )
        self._notify(self._state_handlers, new_state)

    def _record_error(self, message: str) -> None:
        self.error_count += 1
        self.log.append(LogKind.ERROR, message)
        self._notify(self._error_handlers, message)

    def _connector(self) -> aiohttp.BaseConnector:
        if self._proxy_url:
            # Overlay networks provide their own encryption
            return ProxyConnector.from_url(self._proxy_url, ssl=insecure_ssl_context())
        if self._allow_insecure:
            return aiohttp.TCPConnector(ssl=insecure_ssl_context())
        return aiohttp.TCPConnector()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open(self, timeout: float | None = None) -> None:  # noqa: ASYNC109
        """Open the WebSocket connection.

        The outcome is decided by exactly one transition out of
        ``connecting``: to ``connected`` when the handshake completes, or
        to ``error`` when it fails or *timeout* elapses first.

        Args:
            timeout: Seconds to wait for the handshake (default: 5.0).

        Raises:
            RelayTimeoutError: If the handshake did not complete in time.
            ConnectivityError: If the connection failed, or the session was
                already opened or closed.
        """
        if self._opened or self._closed:
            raise ConnectivityError(f"Session already used: {self._url}")
        self._opened = True
        timeout = timeout if timeout is not None else DEFAULT_CONNECT_TIMEOUT

        self._set_state(ConnectionState.CONNECTING)
        try:
            self._http = aiohttp.ClientSession(connector=self._connector())
            async with asyncio.timeout(timeout):
                ws = await self._http.ws_connect(self._url)
        except TimeoutError:
            logger.debug("ws_connect_timeout url=%s timeout=%s", self._url, timeout)
            await self._fail_open(f"Connection timeout after {timeout}s")
            raise RelayTimeoutError(f"Connection timeout: {self._url}") from None
        except (aiohttp.ClientError, OSError, ValueError, ProxyError) as e:
            logger.debug("ws_connect_failed url=%s error=%s", self._url, e)
            await self._fail_open(f"Connection failed: {e}")
            raise ConnectivityError(f"Connection failed: {e}") from e
        except asyncio.CancelledError:
            await self._release()
            raise

        if self._closed or self._state is not ConnectionState.CONNECTING:
            with contextlib.suppress(Exception):
                await ws.close()
            raise ConnectivityError(f"Session closed while connecting: {self._url}")

        self._ws = ws
        self._close_pending = True
        self._set_state(ConnectionState.CONNECTED)
        self._reader = asyncio.create_task(self._read_loop(ws), name=f"reader:{self._url}")

    async def _fail_open(self, message: str) -> None:
        if self._state is ConnectionState.CONNECTING:
            self._record_error(message)
            self._set_state(ConnectionState.ERROR)
        await self._release()

    async def send(self, frame: list[Any]) -> None:
        """JSON-encode and send a frame.

        Raises:
            ConnectivityError: If the session is not connected or the
                transport fails while sending.
        """
        ws = self._ws
        if self._state is not ConnectionState.CONNECTED or ws is None:
            raise ConnectivityError(f"Cannot send on a {self._state.value} session: {self._url}")

        try:
            await ws.send_str(json.dumps(frame))
        except (aiohttp.ClientError, OSError) as e:
            self._record_error(f"Send failed: {e}")
            raise ConnectivityError(f"Send failed: {e}") from e

        self.last_activity = time.monotonic()
        self.log.append(LogKind.SENT, "frame sent", frame)

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self._handle_message(msg.data)
                elif msg.type == aiohttp.WSMsgType.BINARY:
                    self._handle_message(msg.data.decode("utf-8", errors="replace"))
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    self._record_error(f"WebSocket error: {ws.exception()}")
                    self._set_state(ConnectionState.ERROR)
        except (aiohttp.ClientError, OSError) as e:
            self._record_error(f"WebSocket error: {e}")
            self._set_state(ConnectionState.ERROR)

        self._handle_remote_close()

    def _handle_message(self, raw: str) -> None:
        self.message_count += 1
        self.last_activity = time.monotonic()
        self.log.append(LogKind.RECEIVED, "frame received", raw)
        self._notify(self._message_handlers, raw)

    def _handle_remote_close(self) -> None:
        if self._closed:
            return
        logger.debug("connection_closed url=%s", self._url)
        self._set_state(ConnectionState.DISCONNECTED)
        self._fire_close()

    def _fire_close(self) -> None:
        if self._close_pending:
            self._close_pending = False
            self._notify(self._close_handlers)

    async def _release(self) -> None:
        ws, self._ws = self._ws, None
        http, self._http = self._http, None
        # aiohttp can raise ClientError, ServerDisconnectedError, etc. during close
        if ws is not None:
            with contextlib.suppress(Exception):
                await asyncio.wait_for(ws.close(), timeout=self._close_timeout)
        if http is not None:
            with contextlib.suppress(Exception):
                await asyncio.wait_for(http.close(), timeout=self._close_timeout)

    async def close(self) -> None:
        """Close the session and release every resource.

        Idempotent: a second call performs no state transition. Always
        ends in ``disconnected`` and drops all observers.
        """
        if self._closed:
            return
        self._closed = True

        reader, self._reader = self._reader, None
        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
            await asyncio.wait({reader})

        await self._release()
        self._set_state(ConnectionState.DISCONNECTED)
        self._fire_close()

        self._message_handlers.clear()
        self._close_handlers.clear()
        self._error_handlers.clear()
        self._state_handlers.clear()
