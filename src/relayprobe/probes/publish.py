"""
Publish-result correlation.

[PublishCoordinator.publish()][relayprobe.probes.publish.PublishCoordinator.publish]
sends one already-signed event to one relay and waits for the matching
``["OK", <event id>, <bool>, <message>]`` frame.
[PublishCoordinator.batch_publish()][relayprobe.probes.publish.PublishCoordinator.batch_publish]
does the same for several relays concurrently.

The first deciding event wins: a matching ``OK``, the connection closing,
a send failure, or the publish deadline. Frames that are not JSON or that
acknowledge a different event are ignored.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

from relayprobe.core.exceptions import ConnectivityError
from relayprobe.models.results import PublishResult
from relayprobe.nips.nip01 import event_frame, parse_ok_frame

from .base import BaseProbe, elapsed_ms, gather_in_order


if TYPE_CHECKING:
    from collections.abc import Sequence


DEFAULT_OK_MESSAGE = "Event published"
TIMEOUT_MESSAGE = "Publish timeout"
CLOSED_MESSAGE = "Connection closed before acknowledgement"


class PublishCoordinator(BaseProbe):
    """Publishes events and correlates relay acknowledgements.

    Examples:
        ```python
        coordinator = PublishCoordinator()
        results = await coordinator.batch_publish(
            ["wss://nos.lol", "wss://relay.damus.io"], signed_event
        )
        [r.success for r in results]
        ```
    """

    LOGGER_NAME = "relayprobe.publish"

    async def publish(self, url: str, event: dict[str, Any]) -> PublishResult:
        """Publish one signed event to one relay.

        Args:
            url: Relay WebSocket URL.
            event: Signed event as a JSON-compatible dict; must carry ``id``.

        Returns:
            A [PublishResult][relayprobe.models.results.PublishResult].
            ``success`` is True only when a matching ``OK`` with a truthy
            flag arrived before the deadline. ``latency`` is the time to the
            deciding event.
        """
        start = time.perf_counter()
        event_id = str(event.get("id", ""))

        def failed(message: str) -> PublishResult:
            return PublishResult(
                relay=url,
                success=False,
                event_id=event_id,
                message=message,
                latency=elapsed_ms(start),
            )

        try:
            frame = event_frame(event)
        except ValueError as e:
            return failed(str(e))

        session = self._session(url)
        try:
            try:
                await session.open(self._config.timeouts.connect)
            except ConnectivityError as e:
                self._logger.info("publish_failed", url=url, event_id=event_id, error=str(e))
                return failed(str(e))

            loop = asyncio.get_running_loop()
            decided: asyncio.Future[tuple[bool, str]] = loop.create_future()

            def on_message(raw: str) -> None:
                ok = parse_ok_frame(raw)
                if ok is None or ok.event_id != event_id or decided.done():
                    return
                decided.set_result((ok.accepted, ok.message or DEFAULT_OK_MESSAGE))

            def on_close() -> None:
                if not decided.done():
                    decided.set_result((False, CLOSED_MESSAGE))

            session.on_message(on_message)
            session.on_close(on_close)

            try:
                await session.send(frame)
            except ConnectivityError as e:
                return failed(str(e))

            try:
                async with asyncio.timeout(self._config.timeouts.publish):
                    accepted, message = await decided
            except TimeoutError:
                self._logger.info("publish_timeout", url=url, event_id=event_id)
                return failed(TIMEOUT_MESSAGE)

            result = PublishResult(
                relay=url,
                success=accepted,
                event_id=event_id,
                message=message,
                latency=elapsed_ms(start),
            )
            self._logger.info(
                "publish_completed",
                url=url,
                event_id=event_id,
                success=accepted,
                latency_ms=round(result.latency, 2),
            )
            return result
        finally:
            await session.close()

    async def batch_publish(self, urls: Sequence[str], event: dict[str, Any]) -> list[PublishResult]:
        """Publish the same event to several relays concurrently.

        Returns:
            One result per URL, in input order. A failure on one relay is
            isolated in its own slot.
        """
        event_id = str(event.get("id", ""))

        async def publish_one(url: str) -> PublishResult:
            return await self.publish(url, event)

        def on_failure(url: str, error: Exception) -> PublishResult:
            self._logger.error("publish_crashed", url=url, error=str(error))
            return PublishResult(
                relay=url, success=False, event_id=event_id, message=str(error) or "Publish failed"
            )

        results = await gather_in_order(urls, publish_one, on_failure)
        self._logger.info(
            "batch_publish_completed",
            relays=len(results),
            accepted=sum(1 for r in results if r.success),
        )
        return results


async def publish_event(url: str, event: dict[str, Any]) -> PublishResult:
    """Run [PublishCoordinator.publish()][relayprobe.probes.publish.PublishCoordinator.publish] with default settings."""
    return await PublishCoordinator().publish(url, event)


async def batch_publish(urls: Sequence[str], event: dict[str, Any]) -> list[PublishResult]:
    """Run [PublishCoordinator.batch_publish()][relayprobe.probes.publish.PublishCoordinator.batch_publish] with default settings."""
    return await PublishCoordinator().batch_publish(urls, event)
