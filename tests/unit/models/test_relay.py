"""
Unit tests for models.relay module.

Tests:
- URL parsing and normalization (wss/ws, ports, paths)
- Network detection (clearnet, tor, i2p, loki, local)
- Rejection of invalid schemes, hosts, queries and fragments
- NIP-11 companion HTTP URL
- Immutability
"""

import dataclasses

import pytest

from relayprobe.models import NetworkType, Relay
from relayprobe.models.relay import detect_network


class TestParsing:
    """URL parsing and normalization."""

    def test_wss_clearnet(self):
        r = Relay("wss://relay.example.com")
        assert r.url == "wss://relay.example.com"
        assert r.scheme == "wss"
        assert r.host == "relay.example.com"
        assert r.network == NetworkType.CLEARNET
        assert r.port is None
        assert r.path is None

    def test_ws_scheme_kept(self):
        """The caller's scheme is never rewritten."""
        r = Relay("ws://relay.example.com")
        assert r.scheme == "ws"
        assert r.url == "ws://relay.example.com"

    def test_explicit_port(self):
        r = Relay("wss://relay.example.com:8080")
        assert r.url == "wss://relay.example.com:8080"
        assert r.port == 8080

    def test_default_port_omitted(self):
        r = Relay("wss://relay.example.com:443")
        assert r.url == "wss://relay.example.com"
        assert r.port is None

    def test_path_preserved(self):
        assert Relay("wss://relay.example.com/nostr").path == "/nostr"

    def test_trailing_slash_removed(self):
        r = Relay("wss://relay.example.com/")
        assert r.path is None
        assert r.url == "wss://relay.example.com"

    def test_double_slashes_normalized(self):
        assert Relay("wss://relay.example.com//nostr//").path == "/nostr"

    def test_case_normalized(self):
        assert Relay("WSS://Relay.Example.COM").url == "wss://relay.example.com"

    def test_whitespace_stripped(self):
        assert Relay("  wss://relay.example.com  ").url == "wss://relay.example.com"

    def test_ipv4(self):
        assert Relay("wss://8.8.8.8").network == NetworkType.CLEARNET

    def test_ipv6(self):
        r = Relay("wss://[2001:4860:4860::8888]")
        assert r.network == NetworkType.CLEARNET
        assert r.host == "2001:4860:4860::8888"


class TestNetworkDetection:
    """Network type detection."""

    def test_overlays(self):
        assert Relay("ws://abc123.onion").network == NetworkType.TOR
        assert Relay("ws://relay.i2p").network == NetworkType.I2P
        assert Relay("ws://relay.loki").network == NetworkType.LOKI

    def test_overlay_flag(self):
        assert Relay("ws://abc123.onion").is_overlay is True
        assert Relay("wss://relay.example.com").is_overlay is False

    def test_case_insensitive(self):
        assert detect_network("ABC.ONION") == NetworkType.TOR
        assert detect_network("RELAY.I2P") == NetworkType.I2P

    def test_local_detection(self):
        assert detect_network("localhost") == NetworkType.LOCAL
        assert detect_network("127.0.0.1") == NetworkType.LOCAL
        assert detect_network("192.168.1.1") == NetworkType.LOCAL
        assert detect_network("::1") == NetworkType.LOCAL

    def test_unknown_detection(self):
        assert detect_network("") == NetworkType.UNKNOWN
        assert detect_network("nodots") == NetworkType.UNKNOWN
        assert detect_network("bad-.example.com") == NetworkType.UNKNOWN

    def test_local_relay_accepted(self):
        r = Relay("ws://127.0.0.1:7777")
        assert r.network == NetworkType.LOCAL
        assert r.url == "ws://127.0.0.1:7777"


class TestRejection:
    """Invalid URLs raise ValueError."""

    @pytest.mark.parametrize(
        "url",
        ["http://relay.example.com", "https://relay.example.com", "ftp://relay.example.com"],
    )
    def test_invalid_scheme(self, url):
        with pytest.raises(ValueError, match="scheme"):
            Relay(url)

    def test_missing_scheme(self):
        with pytest.raises(ValueError):
            Relay("relay.example.com")

    def test_invalid_host(self):
        with pytest.raises(ValueError, match="Invalid host"):
            Relay("wss://nodots")

    def test_query_rejected(self):
        with pytest.raises(ValueError, match="query"):
            Relay("wss://relay.example.com/?a=1")

    def test_fragment_rejected(self):
        with pytest.raises(ValueError, match="fragment"):
            Relay("wss://relay.example.com/#top")

    def test_null_byte_rejected(self):
        with pytest.raises(ValueError):
            Relay("wss://relay.example.com/\x00")


class TestHttpUrl:
    """NIP-11 companion URL."""

    def test_wss_to_https(self):
        assert Relay("wss://relay.example.com/nostr").http_url == "https://relay.example.com/nostr"

    def test_ws_to_http(self):
        assert Relay("ws://127.0.0.1:7777").http_url == "http://127.0.0.1:7777"


class TestImmutability:
    """Frozen dataclass."""

    def test_attribute_mutation_blocked(self):
        r = Relay("wss://relay.example.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            r.url = "wss://other.example.com"  # type: ignore[misc]

    def test_equality(self):
        assert Relay("wss://relay.example.com") == Relay("wss://relay.example.com")
