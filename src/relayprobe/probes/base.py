"""
Shared plumbing for the probe components.

[BaseProbe][relayprobe.probes.base.BaseProbe] holds the configuration and
structured logger every probe needs and builds
[ConnectionSession][relayprobe.utils.transport.ConnectionSession] objects
with the configured proxy, TLS and close-timeout settings.
[gather_in_order][relayprobe.probes.base.gather_in_order] is the fan-out
used by the multi-relay operations.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, ClassVar, TypeVar

from relayprobe.core.config import ProbeConfig
from relayprobe.core.logger import Logger
from relayprobe.utils.transport import ConnectionSession


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence


T = TypeVar("T")


def elapsed_ms(start: float) -> float:
    """Milliseconds elapsed since a ``time.perf_counter()`` reading."""
    return (time.perf_counter() - start) * 1000


async def gather_in_order(
    urls: Sequence[str],
    operation: Callable[[str], Awaitable[T]],
    on_failure: Callable[[str, Exception], T],
) -> list[T]:
    """Run *operation* concurrently for every URL and merge results in input order.

    Each URL gets its own slot: an exception raised for one URL is turned
    into a value by *on_failure* and never cancels its siblings.

    Args:
        urls: Target endpoints; duplicates are probed independently.
        operation: Per-URL coroutine function.
        on_failure: Builds the slot value for a URL whose operation raised.

    Returns:
        One result per URL, in the same order as *urls*.
    """
    results = await asyncio.gather(*(operation(url) for url in urls), return_exceptions=True)

    merged: list[T] = []
    for url, result in zip(urls, results, strict=True):
        if isinstance(result, Exception):
            merged.append(on_failure(url, result))
        elif isinstance(result, BaseException):
            # CancelledError and friends are captured as results by gather
            raise result
        else:
            merged.append(result)
    return merged


class BaseProbe:
    """Base class for the probe components.

    Attributes:
        LOGGER_NAME: Name of the structured logger used by the subclass.
    """

    LOGGER_NAME: ClassVar[str] = "relayprobe.probes"

    def __init__(self, config: ProbeConfig | None = None) -> None:
        self._config = config if config is not None else ProbeConfig()
        self._logger = Logger(self.LOGGER_NAME)

    @property
    def config(self) -> ProbeConfig:
        return self._config

    def _session(self, url: str) -> ConnectionSession:
        """Create a new, unopened session for *url*."""
        return ConnectionSession(
            url,
            proxy_url=self._config.proxy_for(url),
            allow_insecure=self._config.transport.allow_insecure,
            close_timeout=self._config.timeouts.close,
        )
