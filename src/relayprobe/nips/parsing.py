"""
Lenient type filtering for relay-supplied documents.

Relays publish NIP-11 documents by hand and often get types wrong
(``"max_limit": "500"``, ``"supported_nips": "1,11"``). Models declare
the expected [FieldKind][relayprobe.nips.parsing.FieldKind] per key and
[parse_fields][relayprobe.nips.parsing.parse_fields] keeps only the values
that match, so one bad key never discards the rest of the document.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Mapping


class FieldKind(StrEnum):
    """Expected JSON type of a document field."""

    INT = "int"
    BOOL = "bool"
    STR = "str"
    INT_LIST = "int_list"


_DROP: Any = object()


def _strict_int(value: Any) -> bool:
    # bool is an int subclass
    return isinstance(value, int) and not isinstance(value, bool)


def _coerce(kind: FieldKind, value: Any) -> Any:
    if kind is FieldKind.INT:
        return value if _strict_int(value) else _DROP
    if kind is FieldKind.BOOL:
        return value if isinstance(value, bool) else _DROP
    if kind is FieldKind.STR:
        return value if isinstance(value, str) else _DROP
    if not isinstance(value, list):
        return _DROP
    numbers = [item for item in value if _strict_int(item)]
    return numbers or _DROP


def parse_fields(data: Mapping[str, Any], kinds: Mapping[str, FieldKind]) -> dict[str, Any]:
    """Return the entries of *data* whose values match their declared kind.

    Keys missing from *kinds* are ignored. ``INT_LIST`` values keep only
    their integer items and are dropped when none remain.
    """
    result: dict[str, Any] = {}
    for name, kind in kinds.items():
        if name not in data:
            continue
        value = _coerce(kind, data[name])
        if value is not _DROP:
            result[name] = value
    return result


__all__ = ["FieldKind", "parse_fields"]
