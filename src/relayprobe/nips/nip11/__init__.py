"""NIP-11 Relay Information Document models.

Implements the part of [NIP-11](https://github.com/nostr-protocol/nips/blob/master/11.md)
the probes need: fetching the document over HTTP(S) and parsing it into
typed, frozen Pydantic models. Invalid fields or wrong types are silently
dropped to handle non-conformant relays.

Model hierarchy:

```text
Nip11InfoMetadata                    Data + logs container
+-- data: Nip11InfoData              Parsed NIP-11 document
|   +-- name, description, pubkey, contact, software, version
|   +-- supported_nips: list[int]
|   +-- limitation: Nip11InfoDataLimitation
+-- logs: Nip11InfoLogs              Fetch result status
    +-- success: bool
    +-- reason: str | None
```

See Also:
    [ComplianceTester][relayprobe.probes.compliance.ComplianceTester]:
        Uses ``supported_nips`` to score NIP-01, NIP-42 and NIP-45 support.
"""

from .data import Nip11InfoData, Nip11InfoDataLimitation
from .info import Nip11InfoMetadata
from .logs import Nip11InfoLogs


__all__ = [
    "Nip11InfoData",
    "Nip11InfoDataLimitation",
    "Nip11InfoLogs",
    "Nip11InfoMetadata",
]
