"""
Unit tests for nips.parsing and nips.base modules.

Tests:
- FieldKind-driven parsing drops wrong types
- bool is never accepted as int
- BaseLogs success/reason invariant
"""

import pytest
from pydantic import ValidationError

from relayprobe.nips.base import BaseLogs
from relayprobe.nips.parsing import FieldKind, parse_fields


KINDS = {
    "max_limit": FieldKind.INT,
    "auth_required": FieldKind.BOOL,
    "name": FieldKind.STR,
    "supported_nips": FieldKind.INT_LIST,
}


class TestParseFields:
    """parse_fields() behavior."""

    def test_valid_values_kept(self):
        data = {"max_limit": 500, "auth_required": True, "name": "r", "supported_nips": [1, 11]}
        assert parse_fields(data, KINDS) == data

    def test_wrong_types_dropped(self):
        data = {"max_limit": "500", "auth_required": 1, "name": 7, "supported_nips": "1,11"}
        assert parse_fields(data, KINDS) == {}

    def test_bool_is_not_int(self):
        assert parse_fields({"max_limit": True}, KINDS) == {}

    def test_int_list_filters_elements(self):
        assert parse_fields({"supported_nips": [1, "11", True, 42]}, KINDS) == {
            "supported_nips": [1, 42]
        }

    def test_empty_int_list_dropped(self):
        assert parse_fields({"supported_nips": ["a"]}, KINDS) == {}

    def test_unknown_keys_ignored(self):
        assert parse_fields({"icon": "https://x/icon.png"}, KINDS) == {}

    def test_missing_keys_skipped(self):
        assert parse_fields({"name": "r"}, KINDS) == {"name": "r"}


class TestBaseLogs:
    """BaseLogs success/reason invariant."""

    def test_success(self):
        assert BaseLogs(success=True).to_dict() == {"success": True}

    def test_failure(self):
        assert BaseLogs(success=False, reason="HTTP 404").to_dict() == {
            "success": False,
            "reason": "HTTP 404",
        }

    def test_failure_requires_reason(self):
        with pytest.raises(ValidationError):
            BaseLogs(success=False)

    def test_success_rejects_reason(self):
        with pytest.raises(ValidationError):
            BaseLogs(success=True, reason="x")
