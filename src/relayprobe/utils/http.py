"""HTTP utilities for relayprobe.

Provides bounded JSON reading for HTTP responses so an oversized NIP-11
document cannot exhaust memory.

See Also:
    [Nip11InfoMetadata][relayprobe.nips.nip11.info.Nip11InfoMetadata]:
        NIP-11 info fetch that uses [read_bounded_json][relayprobe.utils.http.read_bounded_json].
"""

from __future__ import annotations

import json
from typing import Any

import aiohttp


async def _read_bounded(response: aiohttp.ClientResponse, max_size: int) -> bytes:
    """Read an entire response body with size enforcement.

    Accumulates chunks until EOF or the size limit is exceeded, which also
    covers chunked transfer-encoding where one read may return fewer bytes
    than requested.

    Raises:
        ValueError: If the response body exceeds *max_size*.
    """
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await response.content.read(max_size + 1 - total)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size:
            raise ValueError(f"Response body too large: >{max_size} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


async def read_bounded_json(response: aiohttp.ClientResponse, max_size: int) -> Any:
    """Read and parse a JSON response body with size enforcement.

    Args:
        response: An aiohttp response whose body has not yet been consumed.
        max_size: Maximum allowed response body size in bytes.

    Returns:
        The parsed JSON value.

    Raises:
        ValueError: If the body exceeds *max_size* or is not valid JSON
            (``json.JSONDecodeError`` is a ``ValueError``).
    """
    body = await _read_bounded(response, max_size)
    return json.loads(body)
