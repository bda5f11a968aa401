"""
NIP-11 metadata container with HTTP info retrieval.

Pairs [Nip11InfoData][relayprobe.nips.nip11.data.Nip11InfoData] with
[Nip11InfoLogs][relayprobe.nips.nip11.logs.Nip11InfoLogs] and provides the
``execute()`` class method that fetches a relay's
[NIP-11](https://github.com/nostr-protocol/nips/blob/master/11.md)
information document.

Note:
    The request converts the relay's WebSocket URL scheme (``wss`` ->
    ``https``, ``ws`` -> ``http``) and sends the
    ``Accept: application/nostr+json`` header. Any 2xx response whose body
    is a JSON object is accepted. Bodies larger than 64 KB are rejected.

    Clearnet HTTPS tries verified SSL first and falls back to ``CERT_NONE``
    only when ``allow_insecure=True``. Overlay networks always use an
    unverified context because the overlay provides its own encryption.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any, ClassVar, Self

import aiohttp
from aiohttp_socks import ProxyConnector, ProxyError
from pydantic import BaseModel, ConfigDict

from relayprobe.models.constants import DEFAULT_INFO_TIMEOUT
from relayprobe.models.relay import Relay
from relayprobe.utils.http import read_bounded_json
from relayprobe.utils.transport import insecure_ssl_context

from .data import Nip11InfoData
from .logs import Nip11InfoLogs


logger = logging.getLogger(__name__)


class Nip11InfoMetadata(BaseModel):
    """Container for NIP-11 info data and operation logs.

    Warning:
        ``execute()`` **never raises** (except on cancellation). All errors
        are captured in ``logs.reason``; check ``logs.success`` before
        relying on data fields.

    Examples:
        ```python
        info = await Nip11InfoMetadata.execute("wss://relay.damus.io")
        if info.logs.success:
            print(info.data.software, info.data.supported_nips)
        ```
    """

    model_config = ConfigDict(frozen=True)

    data: Nip11InfoData
    logs: Nip11InfoLogs

    _INFO_MAX_SIZE: ClassVar[int] = 65_536  # 64 KB

    def to_dict(self) -> dict[str, Any]:
        return {"data": self.data.to_dict(), "logs": self.logs.to_dict()}

    @staticmethod
    async def _info(  # noqa: PLR0913
        http_url: str,
        headers: dict[str, str],
        timeout: float,  # noqa: ASYNC109
        max_size: int,
        ssl_context: ssl.SSLContext | bool,  # noqa: FBT001
        proxy_url: str | None = None,
    ) -> dict[str, Any]:
        """Execute a single HTTP GET request and return the parsed JSON body.

        Raises:
            ValueError: If the status is not 2xx, the body exceeds
                *max_size*, or the body is not a JSON object.
        """
        connector: aiohttp.BaseConnector
        if proxy_url:
            connector = ProxyConnector.from_url(proxy_url, ssl=ssl_context)
        else:
            connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with (
            aiohttp.ClientSession(connector=connector) as session,
            session.get(
                http_url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp,
        ):
            if not 200 <= resp.status < 300:  # noqa: PLR2004
                raise ValueError(f"HTTP {resp.status}")

            data = await read_bounded_json(resp, max_size)
            if not isinstance(data, dict):
                raise ValueError(f"Expected JSON object, got {type(data).__name__}")
            return data

    @classmethod
    async def execute(
        cls,
        url: str,
        timeout: float | None = None,  # noqa: ASYNC109
        max_size: int | None = None,
        proxy_url: str | None = None,
        *,
        allow_insecure: bool = False,
    ) -> Self:
        """Fetch the NIP-11 information document of a relay.

        Args:
            url: Relay WebSocket URL (``ws://`` or ``wss://``).
            timeout: Request timeout in seconds (default: 10.0).
            max_size: Maximum response size in bytes (default: 64 KB).
            proxy_url: Optional SOCKS5 proxy URL for overlay networks.
            allow_insecure: Fall back to unverified SSL on certificate
                errors (default: False).

        Returns:
            A ``Nip11InfoMetadata`` instance with data and logs.
        """
        timeout = timeout if timeout is not None else DEFAULT_INFO_TIMEOUT
        max_size = max_size if max_size is not None else cls._INFO_MAX_SIZE
        headers = {"Accept": "application/nostr+json"}

        data: dict[str, Any] = {}
        logs: dict[str, Any] = {"success": False, "reason": None}
        ssl_fallback = False

        try:
            relay = Relay(url)
            http_url = relay.http_url

            if relay.is_overlay:
                data = await cls._info(
                    http_url, headers, timeout, max_size, insecure_ssl_context(), proxy_url
                )

            elif relay.scheme == "ws":
                data = await cls._info(
                    http_url,
                    headers,
                    timeout,
                    max_size,
                    ssl_context=False,
                    proxy_url=proxy_url,
                )

            else:
                # HTTPS: try verified first, optionally fall back to insecure
                try:
                    data = await cls._info(
                        http_url,
                        headers,
                        timeout,
                        max_size,
                        ssl_context=True,
                        proxy_url=proxy_url,
                    )
                except aiohttp.ClientConnectorCertificateError:
                    if not allow_insecure:
                        raise
                    ssl_fallback = True
                    data = await cls._info(
                        http_url, headers, timeout, max_size, insecure_ssl_context(), proxy_url
                    )

            logs["success"] = True

        except (asyncio.CancelledError, KeyboardInterrupt, SystemExit):
            raise
        except (OSError, TimeoutError, aiohttp.ClientError, ValueError, ProxyError) as e:
            logs["success"] = False
            logs["reason"] = str(e) or type(e).__name__

        result = cls(
            data=Nip11InfoData.model_validate(Nip11InfoData.parse(data)),
            logs=Nip11InfoLogs.model_validate(logs),
        )

        if logs["success"]:
            logger.debug(
                "nip11_info_succeeded url=%s name=%s ssl_fallback=%s",
                url,
                result.data.name,
                ssl_fallback,
            )
        else:
            logger.debug("nip11_info_failed url=%s error=%s", url, logs["reason"])

        return result
