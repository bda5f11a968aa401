"""Nostr key handling for probe publishing.

The probe engine itself only publishes already-signed events. The CLI,
however, needs something to publish when the user does not supply an
event file: this module loads a private key from the environment (nsec1
bech32 or hex) and signs a short text note with ``nostr-sdk``.

Warning:
    Private keys must **never** be stored in configuration files, source
    code, or logged to any output. Always use environment variables.

Examples:
    ```python
    keys = probe_keys()  # PRIVATE_KEY, or a throwaway key pair
    event = build_probe_event(keys, "relayprobe publish test")
    event["id"]  # 64-char hex event id
    ```
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from nostr_sdk import EventBuilder, Keys, Kind


ENV_PRIVATE_KEY = "PRIVATE_KEY"  # pragma: allowlist secret  # Default env var name

PROBE_NOTE_KIND = 1

logger = logging.getLogger(__name__)


def load_keys_from_env(env_var: str = ENV_PRIVATE_KEY) -> Keys:
    """Load Nostr keys from an environment variable.

    Args:
        env_var: Name of the environment variable containing the private key.

    Returns:
        A ``nostr_sdk.Keys`` instance ready for signing operations.

    Raises:
        ValueError: If the environment variable is not set or is empty.
        nostr_sdk.NostrError: If the key value is malformed or invalid.
    """
    value = os.getenv(env_var)

    if not value:
        raise ValueError(
            f"{env_var} environment variable is required. Generate one with: openssl rand -hex 32"
        )

    return Keys.parse(value)


def probe_keys(env_var: str = ENV_PRIVATE_KEY) -> Keys:
    """Return the keys from *env_var*, or a freshly generated throwaway pair.

    Raises:
        nostr_sdk.NostrError: If the variable is set but malformed.
    """
    try:
        return load_keys_from_env(env_var)
    except ValueError:
        logger.info("probe_keys_generated env_var=%s", env_var)
        return Keys.generate()


def build_probe_event(keys: Keys, content: str) -> dict[str, Any]:
    """Sign a kind-1 text note and return it as a JSON-compatible dict.

    Args:
        keys: Signing keys.
        content: Note content.

    Returns:
        The signed event (``id``, ``pubkey``, ``created_at``, ``kind``,
        ``tags``, ``content``, ``sig``).
    """
    event = EventBuilder(Kind(PROBE_NOTE_KIND), content).sign_with_keys(keys)
    signed: dict[str, Any] = json.loads(event.as_json())
    return signed
