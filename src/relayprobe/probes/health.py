"""
Relay health and latency probing.

[HealthProbe.check()][relayprobe.probes.health.HealthProbe.check] opens a
connection, measures the connect round trip, sends one test subscription
and closes it again. [HealthProbe.ping()][relayprobe.probes.health.HealthProbe.ping]
only measures how long it takes to connect.

Both operations always close their session and never raise: failures are
reported through the returned result.
"""

from __future__ import annotations

import asyncio
import time

from relayprobe.core.exceptions import ConnectivityError
from relayprobe.models.results import HealthCheckResult, PingResult
from relayprobe.nips.nip01 import close_frame, req_frame, subscription_id
from relayprobe.utils.transport import ConnectionSession

from .base import BaseProbe, elapsed_ms


class HealthProbe(BaseProbe):
    """Connect-based health checks.

    Examples:
        ```python
        probe = HealthProbe()
        result = await probe.check("wss://relay.damus.io")
        if result.is_healthy:
            print(f"{result.latency:.0f} ms")
        ```
    """

    LOGGER_NAME = "relayprobe.health"

    async def check(self, url: str) -> HealthCheckResult:
        """Check whether a relay accepts connections and subscriptions.

        Steps: open with the health timeout (latency and response time are
        the connect round trip), send ``["REQ", <id>, {"limit": 1}]``, wait
        ``read_wait`` seconds, send ``["CLOSE", <id>]``. Write support is
        assumed from a successful connection; nothing is published.

        Args:
            url: Relay WebSocket URL.

        Returns:
            A [HealthCheckResult][relayprobe.models.results.HealthCheckResult];
            ``error_message`` is set exactly when the relay is unhealthy.
        """
        start = time.perf_counter()
        session = self._session(url)
        try:
            try:
                await session.open(self._config.timeouts.health)
            except ConnectivityError as e:
                self._logger.info("check_failed", url=url, error=str(e))
                return HealthCheckResult(url=url, is_healthy=False, error_message=str(e))

            latency = elapsed_ms(start)
            supports_read = await self._probe_read(session)
            result = HealthCheckResult(
                url=url,
                is_healthy=True,
                latency=latency,
                supports_read=supports_read,
                supports_write=True,
                response_time=latency,
            )
            self._logger.info(
                "check_completed",
                url=url,
                latency_ms=round(latency, 2),
                supports_read=supports_read,
            )
            return result
        finally:
            await session.close()

    async def _probe_read(self, session: ConnectionSession) -> bool:
        sub_id = subscription_id("health_check")
        try:
            await session.send(req_frame(sub_id))
        except ConnectivityError as e:
            self._logger.debug("req_failed", url=session.url, error=str(e))
            return False

        await asyncio.sleep(self._config.timeouts.read_wait)

        try:
            await session.send(close_frame(sub_id))
        except ConnectivityError as e:
            self._logger.debug("close_frame_failed", url=session.url, error=str(e))
        return True

    async def ping(self, url: str) -> PingResult:
        """Measure the time needed to open a connection, then close it.

        Args:
            url: Relay WebSocket URL.

        Returns:
            A [PingResult][relayprobe.models.results.PingResult]. ``latency``
            is the elapsed time until the connection opened, or until the
            attempt failed.
        """
        start = time.perf_counter()
        session = self._session(url)
        try:
            await session.open(self._config.timeouts.connect)
        except ConnectivityError as e:
            latency = elapsed_ms(start)
            self._logger.debug("ping_failed", url=url, error=str(e))
            return PingResult(
                url=url, success=False, latency=latency, error_message=f"Ping failed: {e}"
            )
        else:
            latency = elapsed_ms(start)
            self._logger.debug("ping_completed", url=url, latency_ms=round(latency, 2))
            return PingResult(url=url, success=True, latency=latency)
        finally:
            await session.close()


async def check_health(url: str) -> HealthCheckResult:
    """Run [HealthProbe.check()][relayprobe.probes.health.HealthProbe.check] with default settings."""
    return await HealthProbe().check(url)


async def ping_relay(url: str) -> PingResult:
    """Run [HealthProbe.ping()][relayprobe.probes.health.HealthProbe.ping] with default settings."""
    return await HealthProbe().ping(url)
