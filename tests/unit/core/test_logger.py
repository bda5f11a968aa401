"""
Unit tests for core.logger module.

Tests:
- format_kv_pairs() quoting, escaping and truncation
- StructuredFormatter output for structured and plain records
- Logger key=value extras and JSON output mode
"""

import json
import logging

import pytest

from relayprobe.core.logger import Logger, StructuredFormatter, format_kv_pairs


# ============================================================================
# format_kv_pairs Tests
# ============================================================================


class TestFormatKvPairs:
    """Tests for format_kv_pairs() utility function."""

    def test_empty_dict(self) -> None:
        """Empty input yields an empty string."""
        assert format_kv_pairs({}) == ""

    def test_simple_values(self) -> None:
        """Plain values are emitted unquoted with a leading space."""
        assert format_kv_pairs({"url": "wss://nos.lol", "count": 3}) == " url=wss://nos.lol count=3"

    def test_value_with_spaces_is_quoted(self) -> None:
        """Values containing spaces are wrapped in double quotes."""
        assert format_kv_pairs({"error": "connection refused"}) == ' error="connection refused"'

    def test_value_with_quotes_is_escaped(self) -> None:
        """Embedded double quotes are backslash-escaped."""
        assert format_kv_pairs({"msg": 'say "hi"'}) == ' msg="say \\"hi\\""'

    def test_empty_value_is_quoted(self) -> None:
        """Empty strings render as an explicit pair of quotes."""
        assert format_kv_pairs({"reason": ""}) == ' reason=""'

    def test_truncation(self) -> None:
        """Long values are cut and annotated with the dropped length."""
        result = format_kv_pairs({"frame": "x" * 20}, max_value_length=5)
        assert result.startswith(' frame="xxxxx...<truncated 15 chars>"')

    def test_no_truncation_when_disabled(self) -> None:
        """None disables truncation."""
        assert format_kv_pairs({"frame": "x" * 2000}, max_value_length=None) == " frame=" + "x" * 2000

    def test_custom_prefix(self) -> None:
        """The prefix replaces the default leading space."""
        assert format_kv_pairs({"a": 1}, prefix="| ") == "| a=1"


# ============================================================================
# StructuredFormatter Tests
# ============================================================================


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    @staticmethod
    def _record(msg: str, **extra) -> logging.LogRecord:
        record = logging.LogRecord("relayprobe.health", logging.INFO, __file__, 1, msg, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_structured_record(self) -> None:
        """structured_kv extras are appended as key=value pairs."""
        record = self._record("check_completed", structured_kv={"latency_ms": 12.5})
        assert StructuredFormatter().format(record) == (
            "info relayprobe.health check_completed latency_ms=12.5"
        )

    def test_plain_record(self) -> None:
        """Records from plain stdlib loggers keep the same prefix."""
        record = self._record("state_changed url=ws://x")
        assert StructuredFormatter().format(record) == (
            "info relayprobe.health state_changed url=ws://x"
        )


# ============================================================================
# Logger Tests
# ============================================================================


class TestLogger:
    """Tests for the Logger wrapper."""

    def test_name(self) -> None:
        """The wrapped stdlib logger keeps the given name."""
        assert Logger("relayprobe.stress").name == "relayprobe.stress"

    def test_kv_extra(self, caplog: pytest.LogCaptureFixture) -> None:
        """Keyword arguments travel on the record as structured_kv."""
        caplog.set_level(logging.INFO, logger="test.kv")
        Logger("test.kv").info("run_completed", successful=4, failed=1)

        record = caplog.records[-1]
        assert record.getMessage() == "run_completed"
        assert record.structured_kv == {"successful": 4, "failed": 1}

    def test_kv_extra_truncated(self, caplog: pytest.LogCaptureFixture) -> None:
        """Values longer than max_value_length are truncated before formatting."""
        caplog.set_level(logging.INFO, logger="test.trunc")
        Logger("test.trunc", max_value_length=4).info("frame_received", data="abcdefgh")

        assert caplog.records[-1].structured_kv["data"].startswith("abcd...")

    def test_json_output(self, caplog: pytest.LogCaptureFixture) -> None:
        """JSON mode emits one JSON object per message."""
        caplog.set_level(logging.WARNING, logger="test.json")
        Logger("test.json", json_output=True).warning("attempt_crashed", url="ws://x")

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["message"] == "attempt_crashed"
        assert payload["level"] == "warning"
        assert payload["logger"] == "test.json"
        assert payload["url"] == "ws://x"
        assert "timestamp" in payload

    def test_disabled_level_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """Messages below the effective level are not emitted."""
        caplog.set_level(logging.WARNING, logger="test.level")
        Logger("test.level").debug("noise", a=1)

        assert not [r for r in caplog.records if r.name == "test.level"]

    def test_exception_includes_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        """exception() attaches the active exception info."""
        caplog.set_level(logging.ERROR, logger="test.exc")
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            Logger("test.exc").exception("on_log_failed", url="ws://x")

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.exc_info is not None
