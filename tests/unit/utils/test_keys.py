"""
Unit tests for utils.keys module.

Tests:
- load_keys_from_env() with hex keys and missing variables
- probe_keys() fallback to a generated key pair
- build_probe_event() produces a signed kind-1 note
"""

import pytest
from nostr_sdk import Keys

from relayprobe.utils.keys import (
    ENV_PRIVATE_KEY,
    PROBE_NOTE_KIND,
    build_probe_event,
    load_keys_from_env,
    probe_keys,
)


class TestLoadKeysFromEnv:
    """load_keys_from_env()."""

    def test_hex_key(self, monkeypatch: pytest.MonkeyPatch):
        keys = Keys.generate()
        monkeypatch.setenv(ENV_PRIVATE_KEY, keys.secret_key().to_hex())

        loaded = load_keys_from_env()

        assert loaded.public_key().to_hex() == keys.public_key().to_hex()

    def test_custom_variable(self, monkeypatch: pytest.MonkeyPatch):
        keys = Keys.generate()
        monkeypatch.setenv("PROBE_KEY", keys.secret_key().to_hex())

        assert load_keys_from_env("PROBE_KEY").public_key().to_hex() == keys.public_key().to_hex()

    def test_missing(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv(ENV_PRIVATE_KEY, raising=False)
        with pytest.raises(ValueError, match=ENV_PRIVATE_KEY):
            load_keys_from_env()

    def test_empty(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(ENV_PRIVATE_KEY, "")
        with pytest.raises(ValueError):
            load_keys_from_env()


class TestProbeKeys:
    """probe_keys()."""

    def test_uses_env(self, monkeypatch: pytest.MonkeyPatch):
        keys = Keys.generate()
        monkeypatch.setenv(ENV_PRIVATE_KEY, keys.secret_key().to_hex())

        assert probe_keys().public_key().to_hex() == keys.public_key().to_hex()

    def test_generates_when_missing(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv(ENV_PRIVATE_KEY, raising=False)

        first = probe_keys()
        second = probe_keys()

        assert first.public_key().to_hex() != second.public_key().to_hex()


class TestBuildProbeEvent:
    """build_probe_event()."""

    def test_signed_note(self):
        keys = Keys.generate()
        event = build_probe_event(keys, "relayprobe publish test")

        assert event["kind"] == PROBE_NOTE_KIND
        assert event["content"] == "relayprobe publish test"
        assert event["pubkey"] == keys.public_key().to_hex()
        assert len(event["id"]) == 64
        assert len(event["sig"]) == 128
