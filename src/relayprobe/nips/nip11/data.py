"""
NIP-11 relay information data models.

Typed views over the subset of a NIP-11 document the probes use: relay
identification, software, supported NIPs and server limitations. Unknown
keys and values of the wrong type are dropped during ``parse()``.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, StrictBool, StrictInt

from relayprobe.nips.base import BaseData
from relayprobe.nips.parsing import FieldKind


class Nip11InfoDataLimitation(BaseData):
    """Server-imposed limitations advertised in the NIP-11 document.

    All fields are optional; relays may omit any or all of them.
    """

    max_message_length: StrictInt | None = None
    max_subscriptions: StrictInt | None = None
    max_limit: StrictInt | None = None
    max_subid_length: StrictInt | None = None
    max_event_tags: StrictInt | None = None
    max_content_length: StrictInt | None = None
    min_pow_difficulty: StrictInt | None = None
    auth_required: StrictBool | None = None
    payment_required: StrictBool | None = None
    restricted_writes: StrictBool | None = None

    _FIELDS: ClassVar[dict[str, FieldKind]] = {
        "max_message_length": FieldKind.INT,
        "max_subscriptions": FieldKind.INT,
        "max_limit": FieldKind.INT,
        "max_subid_length": FieldKind.INT,
        "max_event_tags": FieldKind.INT,
        "max_content_length": FieldKind.INT,
        "min_pow_difficulty": FieldKind.INT,
        "auth_required": FieldKind.BOOL,
        "payment_required": FieldKind.BOOL,
        "restricted_writes": FieldKind.BOOL,
    }


class Nip11InfoData(BaseData):
    """Relay information document.

    Overrides ``parse()`` to handle the nested ``limitation`` object.
    """

    name: str | None = None
    description: str | None = None
    pubkey: str | None = None
    contact: str | None = None
    software: str | None = None
    version: str | None = None
    supported_nips: list[StrictInt] | None = None
    limitation: Nip11InfoDataLimitation = Field(default_factory=Nip11InfoDataLimitation)

    _FIELDS: ClassVar[dict[str, FieldKind]] = {
        **dict.fromkeys(
            ("name", "description", "pubkey", "contact", "software", "version"), FieldKind.STR
        ),
        "supported_nips": FieldKind.INT_LIST,
    }

    @classmethod
    def parse(cls, data: Any) -> dict[str, Any]:
        """Parse a NIP-11 document, including its ``limitation`` sub-object.

        Args:
            data: Raw JSON value from the relay HTTP response.

        Returns:
            Validated dictionary suitable for model construction.
        """
        result = super().parse(data)
        if isinstance(data, dict) and "limitation" in data:
            limitation = Nip11InfoDataLimitation.parse(data["limitation"])
            if limitation:
                result["limitation"] = limitation
        return result

    def supports(self, nip: int) -> bool:
        """Return True if *nip* is listed in ``supported_nips``."""
        return self.supported_nips is not None and nip in self.supported_nips

    def to_dict(self) -> dict[str, Any]:
        """Serialize, omitting ``None`` values and an empty ``limitation``."""
        result = super().to_dict()
        if not result.get("limitation"):
            result.pop("limitation", None)
        return result
