"""
Validated relay endpoint URL with network type detection.

Parses and normalizes WebSocket relay URLs (``ws://`` or ``wss://``) and
classifies the host into a [NetworkType][relayprobe.models.constants.NetworkType].
Relays on ``localhost`` or a LAN are accepted and tagged ``LOCAL``.

The probe operations themselves take plain URL strings; this model is used
by callers (the CLI, configuration) that need to validate user input or
pick a proxy for an overlay network.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from ipaddress import IPv4Network, IPv6Network, ip_address, ip_network
from typing import ClassVar

from rfc3986 import uri_reference
from rfc3986.exceptions import UnpermittedComponentError, ValidationError
from rfc3986.validators import Validator

from .constants import OVERLAY_NETWORKS, NetworkType


_NETWORK_TLDS: dict[str, NetworkType] = {
    ".onion": NetworkType.TOR,
    ".i2p": NetworkType.I2P,
    ".loki": NetworkType.LOKI,
}

# Loopback, private and link-local ranges
_LOCAL_NETWORKS: list[IPv4Network | IPv6Network] = [
    ip_network("0.0.0.0/8"),
    ip_network("10.0.0.0/8"),
    ip_network("100.64.0.0/10"),
    ip_network("127.0.0.0/8"),
    ip_network("169.254.0.0/16"),
    ip_network("172.16.0.0/12"),
    ip_network("192.168.0.0/16"),
    ip_network("::1/128"),
    ip_network("::/128"),
    ip_network("fc00::/7"),
    ip_network("fe80::/10"),
]


def detect_network(host: str) -> NetworkType:
    """Classify a hostname into a network type.

    Checks overlay TLDs first, then local names and addresses, and finally
    validates the label structure of a DNS name.

    Args:
        host: Hostname or IP address (IPv6 may be bracketed).

    Returns:
        The detected ``NetworkType``; ``UNKNOWN`` for empty or malformed hosts.
    """
    if not host:
        return NetworkType.UNKNOWN

    host_bare = host.lower().strip("[]")

    for tld, network in _NETWORK_TLDS.items():
        if host_bare.endswith(tld):
            return network

    if host_bare in ("localhost", "localhost.localdomain"):
        return NetworkType.LOCAL

    try:
        ip = ip_address(host_bare)
    except ValueError:
        pass
    else:
        is_local = any(ip in net for net in _LOCAL_NETWORKS)
        return NetworkType.LOCAL if is_local else NetworkType.CLEARNET

    if "." not in host_bare:
        return NetworkType.UNKNOWN

    labels = host_bare.split(".")
    valid = all(
        label and not label.startswith("-") and not label.endswith("-") for label in labels
    )
    return NetworkType.CLEARNET if valid else NetworkType.UNKNOWN


@dataclass(frozen=True, slots=True)
class Relay:
    """Immutable, validated relay endpoint.

    Attributes:
        url: Normalized URL including scheme (default ports removed).
        network: Detected ``NetworkType``.
        scheme: ``ws`` or ``wss``, as given by the caller.
        host: Hostname or IP address (brackets stripped for IPv6).
        port: Explicit port number, or ``None`` when using the default.
        path: URL path component, or ``None``.

    Raises:
        ValueError: If the URL is malformed, uses a scheme other than
            ``ws``/``wss``, has an unclassifiable host, or carries a query
            string or fragment.

    Examples:
        ```python
        relay = Relay("wss://relay.damus.io/")
        relay.url        # 'wss://relay.damus.io'
        relay.http_url   # 'https://relay.damus.io'
        Relay("ws://localhost:7777").network  # NetworkType.LOCAL
        ```
    """

    raw_url: str = field(repr=False)

    url: str = field(init=False)
    network: NetworkType = field(init=False)
    scheme: str = field(init=False)
    host: str = field(init=False)
    port: int | None = field(init=False)
    path: str | None = field(init=False)

    _DEFAULT_PORTS: ClassVar[dict[str, int]] = {"ws": 80, "wss": 443, "http": 80, "https": 443}

    def __post_init__(self) -> None:
        if "\x00" in self.raw_url:
            raise ValueError("Relay URL contains null bytes")

        uri = uri_reference(self.raw_url.strip()).normalize()
        validator = (
            Validator()
            .require_presence_of("scheme", "host")
            .allow_schemes("ws", "wss")
            .check_validity_of("scheme", "host", "port", "path")
        )
        try:
            validator.validate(uri)
        except UnpermittedComponentError:
            raise ValueError("Invalid scheme: must be ws or wss") from None
        except ValidationError as e:
            raise ValueError(f"Invalid URL: {e}") from None

        if uri.query:
            raise ValueError(f"Relay URL must not contain a query string: ?{uri.query}")
        if uri.fragment:
            raise ValueError(f"Relay URL must not contain a fragment: #{uri.fragment}")

        host = uri.host.strip("[]")
        network = detect_network(host)
        if network == NetworkType.UNKNOWN:
            raise ValueError(f"Invalid host: '{host}'")

        path = uri.path or ""
        while "//" in path:
            path = path.replace("//", "/")
        path = path.rstrip("/") or None

        scheme = uri.scheme
        port = int(uri.port) if uri.port else None
        if port == self._DEFAULT_PORTS[scheme]:
            port = None

        # Bypass frozen restriction to set computed fields
        object.__setattr__(self, "scheme", scheme)
        object.__setattr__(self, "host", host)
        object.__setattr__(self, "port", port)
        object.__setattr__(self, "path", path)
        object.__setattr__(self, "network", network)
        object.__setattr__(self, "url", self._build_url(scheme))

    def _build_url(self, scheme: str) -> str:
        formatted_host = f"[{self.host}]" if ":" in self.host else self.host
        port_suffix = f":{self.port}" if self.port else ""
        return f"{scheme}://{formatted_host}{port_suffix}{self.path or ''}"

    @property
    def http_url(self) -> str:
        """The NIP-11 companion address (``wss`` -> ``https``, ``ws`` -> ``http``)."""
        return self._build_url("https" if self.scheme == "wss" else "http")

    @property
    def is_overlay(self) -> bool:
        return self.network in OVERLAY_NETWORKS
