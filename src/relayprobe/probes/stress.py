"""
Concurrent connection stress testing.

[StressRunner.run()][relayprobe.probes.stress.StressRunner.run] launches
many connection attempts against one relay at once. Each successful
connection is held open for a uniform random time (up to
``stress.max_hold`` seconds) before it is closed; a failed attempt is
counted once and never retried.
"""

from __future__ import annotations

import asyncio
import random
import time

from relayprobe.core.exceptions import ConnectivityError
from relayprobe.models.results import StressTestResult

from .base import BaseProbe, elapsed_ms


class StressRunner(BaseProbe):
    """Fires concurrent connection attempts at a relay.

    Examples:
        ```python
        result = await StressRunner().run("wss://nos.lol", connection_count=50, duration=10)
        result.successful_connections + result.failed_connections == 50  # True
        ```
    """

    LOGGER_NAME = "relayprobe.stress"

    async def _attempt(self, url: str) -> float | None:
        """Open, hold and close one connection; return its connect latency or None."""
        start = time.perf_counter()
        session = self._session(url)
        try:
            await session.open(self._config.timeouts.connect)
            latency = elapsed_ms(start)
            await asyncio.sleep(random.uniform(0.0, self._config.stress.max_hold))  # noqa: S311
            return latency
        except ConnectivityError as e:
            self._logger.debug("attempt_failed", url=url, error=str(e))
            return None
        finally:
            await session.close()

    async def run(self, url: str, connection_count: int, duration: float) -> StressTestResult:
        """Run the stress test and wait for every attempt to finish.

        Args:
            url: Relay WebSocket URL.
            connection_count: Number of concurrent attempts (``>= 0``).
            duration: Requested test duration in seconds. It is reported in
                the result but does not cut the run short.

        Returns:
            A [StressTestResult][relayprobe.models.results.StressTestResult]
            whose ``duration`` is the elapsed wall clock in ms and whose
            ``average_latency`` covers successful attempts only.

        Raises:
            ValueError: If *connection_count* or *duration* is negative.
        """
        if connection_count < 0:
            raise ValueError(f"connection_count must be >= 0, got {connection_count}")
        if duration < 0:
            raise ValueError(f"duration must be >= 0, got {duration}")

        self._logger.info("run_started", url=url, connections=connection_count)
        start = time.perf_counter()

        outcomes = await asyncio.gather(
            *(self._attempt(url) for _ in range(connection_count)), return_exceptions=True
        )

        latencies: list[float] = []
        failed = 0
        for outcome in outcomes:
            if isinstance(outcome, float):
                latencies.append(outcome)
            elif outcome is None:
                failed += 1
            elif isinstance(outcome, Exception):
                self._logger.warning("attempt_crashed", url=url, error=str(outcome))
                failed += 1
            else:
                # CancelledError is captured as a result by gather
                raise outcome

        result = StressTestResult(
            url=url,
            total_connections=connection_count,
            successful_connections=len(latencies),
            failed_connections=failed,
            average_latency=sum(latencies) / len(latencies) if latencies else 0.0,
            duration=elapsed_ms(start),
            requested_duration=duration,
        )
        self._logger.info(
            "run_completed",
            url=url,
            successful=result.successful_connections,
            failed=result.failed_connections,
            avg_latency_ms=round(result.average_latency, 2),
        )
        return result


async def stress_test(url: str, connection_count: int, duration: float) -> StressTestResult:
    """Run [StressRunner.run()][relayprobe.probes.stress.StressRunner.run] with default settings."""
    return await StressRunner().run(url, connection_count, duration)
