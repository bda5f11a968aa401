"""
Pytest configuration and shared fixtures for relayprobe tests.

Provides:
- A scriptable local relay (WebSocket + NIP-11 over plain HTTP) on 127.0.0.1
- An unused local port for connection-refused scenarios
- A ProbeConfig with short timeouts so failure paths finish quickly
- A sample signed-looking event
"""

from __future__ import annotations

import asyncio
import json
import logging
import socket
from typing import Any

import pytest
from aiohttp import WSMsgType, web
from aiohttp.test_utils import TestServer

from relayprobe.core.config import (
    MonitorConfig,
    ProbeConfig,
    StressConfig,
    TimeoutsConfig,
)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Local Relay
# ============================================================================


class FakeRelay:
    """Minimal scriptable Nostr relay.

    WebSocket upgrades on ``/`` speak a tiny subset of NIP-01: ``REQ`` is
    answered with ``EOSE`` and ``EVENT`` with an ``OK`` built from the
    ``ok_*`` attributes. Plain GET requests on ``/`` return ``nip11_body``.
    Tests flip the attributes to script failure modes.
    """

    def __init__(self) -> None:
        self.received: list[list[Any]] = []
        self.connections = 0
        self.sockets: set[web.WebSocketResponse] = set()

        self.ok_accepted: bool = True
        self.ok_message: str = "stored"
        self.noise_before_ok = False
        self.silent = False
        self.close_on_event = False
        self.close_immediately = False
        self.handshake_delay = 0.0

        self.nip11_status = 200
        self.nip11_body: Any = {
            "name": "Local Test Relay",
            "software": "fake-relay",
            "supported_nips": [1, 11, 42],
            "limitation": {"max_subscriptions": 20, "auth_required": False},
        }

        self.server: TestServer | None = None

    @property
    def url(self) -> str:
        assert self.server is not None
        return f"ws://127.0.0.1:{self.server.port}"

    async def handle(self, request: web.Request) -> web.StreamResponse:
        ws = web.WebSocketResponse()
        if not ws.can_prepare(request).ok:
            return web.Response(
                text=json.dumps(self.nip11_body),
                status=self.nip11_status,
                content_type="application/nostr+json",
            )

        if self.handshake_delay:
            await asyncio.sleep(self.handshake_delay)
        await ws.prepare(request)
        self.connections += 1
        self.sockets.add(ws)
        try:
            if self.close_immediately:
                await ws.close()
                return ws
            async for msg in ws:
                if msg.type != WSMsgType.TEXT:
                    continue
                frame = json.loads(msg.data)
                self.received.append(frame)
                if frame[0] == "REQ":
                    await ws.send_str(json.dumps(["EOSE", frame[1]]))
                elif frame[0] == "EVENT":
                    await self._answer_event(ws, frame[1])
        finally:
            self.sockets.discard(ws)
        return ws

    async def _answer_event(self, ws: web.WebSocketResponse, event: dict[str, Any]) -> None:
        if self.close_on_event:
            await ws.close()
            return
        if self.noise_before_ok:
            await ws.send_str("not json at all")
            await ws.send_str(json.dumps(["NOTICE", "hello"]))
            await ws.send_str(json.dumps(["OK", "f" * 64, False, "other event"]))
        if self.silent:
            return
        await ws.send_str(json.dumps(["OK", event["id"], self.ok_accepted, self.ok_message]))

    async def close_all(self) -> None:
        """Close every open WebSocket from the relay side."""
        for ws in list(self.sockets):
            await ws.close()

    def frames(self, frame_type: str) -> list[list[Any]]:
        return [f for f in self.received if f[0] == frame_type]


@pytest.fixture
async def relay():
    """Running FakeRelay bound to an ephemeral port on 127.0.0.1."""
    fake = FakeRelay()
    app = web.Application()
    app.router.add_get("/", fake.handle)
    server = TestServer(app, host="127.0.0.1")
    await server.start_server()
    fake.server = server
    try:
        yield fake
    finally:
        await fake.close_all()
        await server.close()


@pytest.fixture
def refused_url() -> str:
    """WebSocket URL on a local port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"ws://127.0.0.1:{port}"


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def fast_config() -> ProbeConfig:
    """ProbeConfig with short timeouts and hold times."""
    return ProbeConfig(
        timeouts=TimeoutsConfig(
            connect=2.0,
            health=2.0,
            read_wait=0.05,
            publish=1.0,
            info=2.0,
            close=1.0,
        ),
        stress=StressConfig(max_hold=0.05),
        monitor=MonitorConfig(poll_interval=0.02),
    )


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_event() -> dict[str, Any]:
    """Event dict shaped like a signed kind-1 note (signature not verified)."""
    return {
        "id": "a" * 64,
        "pubkey": "b" * 64,
        "created_at": 1700000000,
        "kind": 1,
        "tags": [],
        "content": "relayprobe test",
        "sig": "c" * 128,
    }
