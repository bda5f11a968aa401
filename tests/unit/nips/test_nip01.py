"""
Unit tests for nips.nip01 module.

Tests:
- REQ / CLOSE / EVENT frame builders
- Subscription id format and uniqueness
- Tolerant OK frame parsing
"""

import json

import pytest

from relayprobe.nips.nip01 import (
    OkFrame,
    close_frame,
    event_frame,
    parse_ok_frame,
    req_frame,
    subscription_id,
)


# =============================================================================
# Builders
# =============================================================================


class TestFrameBuilders:
    """Outbound frame construction."""

    def test_req_default_filter(self):
        assert req_frame("sub1") == ["REQ", "sub1", {"limit": 1}]

    def test_req_custom_filter(self):
        assert req_frame("sub1", {"kinds": [1]}) == ["REQ", "sub1", {"kinds": [1]}]

    def test_close(self):
        assert close_frame("sub1") == ["CLOSE", "sub1"]

    def test_event(self, sample_event):
        assert event_frame(sample_event) == ["EVENT", sample_event]

    def test_event_requires_id(self):
        with pytest.raises(ValueError, match="id"):
            event_frame({"content": "no id"})

    def test_event_frames_are_json_serializable(self, sample_event):
        assert json.loads(json.dumps(event_frame(sample_event)))[1]["id"] == sample_event["id"]


class TestSubscriptionId:
    """subscription_id()."""

    def test_prefix(self):
        sub_id = subscription_id("health_check")
        assert sub_id.startswith("health_check_")
        assert len(sub_id) == len("health_check_") + 16

    def test_unique(self):
        assert len({subscription_id() for _ in range(100)}) == 100


# =============================================================================
# OK Parsing
# =============================================================================


class TestParseOkFrame:
    """parse_ok_frame()."""

    def test_accepted(self):
        raw = json.dumps(["OK", "a" * 64, True, ""])
        assert parse_ok_frame(raw) == OkFrame("a" * 64, True, "")

    def test_rejected_with_message(self):
        raw = json.dumps(["OK", "abc", False, "blocked: spam"])
        ok = parse_ok_frame(raw)
        assert ok is not None
        assert ok.accepted is False
        assert ok.message == "blocked: spam"

    def test_missing_message_defaults_to_empty(self):
        ok = parse_ok_frame(json.dumps(["OK", "abc", True]))
        assert ok is not None
        assert ok.message == ""

    def test_bytes_payload(self):
        ok = parse_ok_frame(json.dumps(["OK", "abc", True, "ok"]).encode())
        assert ok is not None
        assert ok.event_id == "abc"

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "{}",
            "[]",
            json.dumps(["NOTICE", "hello"]),
            json.dumps(["EOSE", "sub1"]),
            json.dumps(["OK", "abc"]),
            json.dumps(["OK", 123, True, ""]),
        ],
    )
    def test_ignored(self, raw):
        assert parse_ok_frame(raw) is None
