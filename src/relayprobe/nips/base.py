"""
Base models for NIP documents and fetch logs.

[BaseData][relayprobe.nips.base.BaseData] backs the typed views over relay
documents; [BaseLogs][relayprobe.nips.base.BaseLogs] records how a fetch
went.
"""

from __future__ import annotations

from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, StrictBool, model_validator

from .parsing import FieldKind, parse_fields


class BaseData(BaseModel):
    """Frozen document model built from untrusted relay JSON.

    Subclasses list their top-level keys in ``_FIELDS``; ``parse()`` turns
    a raw value into constructor keyword arguments with every mistyped
    value removed.
    """

    model_config = ConfigDict(frozen=True)

    _FIELDS: ClassVar[dict[str, FieldKind]] = {}

    @classmethod
    def parse(cls, data: Any) -> dict[str, Any]:
        """Filter *data* down to the well-typed ``_FIELDS`` (``{}`` for non-objects)."""
        if not isinstance(data, dict):
            return {}
        return parse_fields(data, cls._FIELDS)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class BaseLogs(BaseModel):
    """Outcome of a fetch: ``reason`` is present exactly when ``success`` is False."""

    model_config = ConfigDict(frozen=True)

    success: StrictBool
    reason: str | None = None

    @model_validator(mode="after")
    def validate_semantic(self) -> Self:
        if self.success == (self.reason is not None):
            raise ValueError(
                "reason must be None on success"
                if self.success
                else "reason is required on failure"
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
