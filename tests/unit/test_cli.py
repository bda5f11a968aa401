"""
Unit tests for the relayprobe CLI (__main__ module).

Tests:
- Argument parsing for every sub-command
- Exit codes for invalid URLs, bad configuration and invalid stress arguments
- End-to-end commands against the local relay with JSON on stdout
- Event file loading
"""

import json
import logging
from pathlib import Path

import pytest

from relayprobe.__main__ import (
    EXIT_FAILURE,
    EXIT_OK,
    EXIT_USAGE,
    load_event,
    main,
    parse_args,
)
from relayprobe.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() installs a handler on the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "relayprobe.yaml"
    path.write_text(
        "timeouts:\n  connect: 2\n  health: 2\n  read_wait: 0.05\n  publish: 1\n"
        "stress:\n  max_hold: 0.05\n"
    )
    return path


def _stdout_json(capsys: pytest.CaptureFixture[str]):
    return json.loads(capsys.readouterr().out)


# ============================================================================
# Argument Parsing
# ============================================================================


class TestParseArgs:
    """parse_args()."""

    def test_health(self):
        args = parse_args(["health", "wss://nos.lol"])
        assert args.command == "health"
        assert args.urls == ["wss://nos.lol"]
        assert args.json is False
        assert args.log_level == "WARNING"

    def test_compare_many(self):
        args = parse_args(["--json", "compare", "wss://a.example.com", "wss://b.example.com"])
        assert args.urls == ["wss://a.example.com", "wss://b.example.com"]
        assert args.json is True

    def test_stress_defaults(self):
        args = parse_args(["stress", "wss://nos.lol"])
        assert args.connections == 10
        assert args.duration == 10.0

    def test_stress_options(self):
        args = parse_args(["stress", "wss://nos.lol", "-n", "50", "-d", "2.5"])
        assert args.connections == 50
        assert args.duration == 2.5

    def test_publish_event_file(self):
        args = parse_args(["publish", "wss://nos.lol", "--event", "e.json"])
        assert args.event == Path("e.json")

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_single_url_commands(self):
        with pytest.raises(SystemExit):
            parse_args(["health", "wss://a.example.com", "wss://b.example.com"])


# ============================================================================
# Usage Errors
# ============================================================================


class TestUsageErrors:
    """Exit code 2 paths."""

    async def test_invalid_url(self):
        assert await main(["health", "https://relay.example.com"]) == EXIT_USAGE

    async def test_missing_config(self, tmp_path: Path):
        code = await main(["--config", str(tmp_path / "nope.yaml"), "ping", "ws://127.0.0.1:1"])
        assert code == EXIT_USAGE

    async def test_invalid_config(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("timeouts:\n  connect: -1\n")
        assert await main(["--config", str(path), "ping", "ws://127.0.0.1:1"]) == EXIT_USAGE

    async def test_negative_stress_connections(self):
        assert await main(["stress", "ws://127.0.0.1:1", "-n", "-1"]) == EXIT_USAGE


# ============================================================================
# Commands
# ============================================================================


class TestCommands:
    """Commands against the local relay."""

    async def test_health(self, relay, config_file, capsys):
        code = await main(["--config", str(config_file), "health", relay.url])

        assert code == EXIT_OK
        assert _stdout_json(capsys)["is_healthy"] is True

    async def test_ping_refused(self, refused_url, config_file, capsys):
        code = await main(["--config", str(config_file), "--json", "ping", refused_url])

        assert code == EXIT_FAILURE
        out = capsys.readouterr().out
        assert out.count("\n") == 1
        assert json.loads(out)["success"] is False

    async def test_info(self, relay, config_file, capsys):
        code = await main(["--config", str(config_file), "info", relay.url])

        assert code == EXIT_OK
        assert _stdout_json(capsys)["data"]["name"] == "Local Test Relay"

    async def test_compare(self, relay, refused_url, config_file, capsys):
        code = await main(["--config", str(config_file), "compare", relay.url, refused_url])

        assert code == EXIT_FAILURE
        results = _stdout_json(capsys)
        assert [r["url"] for r in results] == [relay.url, refused_url]

    async def test_publish(self, relay, config_file, tmp_path, sample_event, capsys):
        event_path = tmp_path / "event.json"
        event_path.write_text(json.dumps(sample_event))

        code = await main(
            ["--config", str(config_file), "publish", relay.url, "--event", str(event_path)]
        )

        assert code == EXIT_OK
        assert _stdout_json(capsys)[0]["success"] is True

    async def test_publish_rejected(self, relay, config_file, tmp_path, sample_event, capsys):
        relay.ok_accepted = False
        event_path = tmp_path / "event.json"
        event_path.write_text(json.dumps(sample_event))

        code = await main(
            ["--config", str(config_file), "publish", relay.url, "--event", str(event_path)]
        )

        assert code == EXIT_FAILURE
        assert _stdout_json(capsys)[0]["success"] is False

    async def test_publish_generated_event(self, relay, config_file, monkeypatch, capsys):
        monkeypatch.delenv("PRIVATE_KEY", raising=False)

        code = await main(["--config", str(config_file), "publish", relay.url])

        assert code == EXIT_OK
        result = _stdout_json(capsys)[0]
        assert result["success"] is True
        assert relay.frames("EVENT")[0][1]["id"] == result["event_id"]

    async def test_stress(self, relay, config_file, capsys):
        code = await main(["--config", str(config_file), "stress", relay.url, "-n", "3", "-d", "1"])

        assert code == EXIT_OK
        result = _stdout_json(capsys)
        assert result["successful_connections"] == 3
        assert result["requested_duration"] == 1.0


# ============================================================================
# Event Loading
# ============================================================================


class TestLoadEvent:
    """load_event()."""

    def test_file(self, tmp_path: Path, sample_event):
        path = tmp_path / "event.json"
        path.write_text(json.dumps(sample_event))
        assert load_event(path) == sample_event

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError):
            load_event(tmp_path / "missing.json")

    def test_not_an_object(self, tmp_path: Path):
        path = tmp_path / "event.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_event(path)

    def test_generated(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("PRIVATE_KEY", raising=False)
        event = load_event(None)
        assert event["kind"] == 1
        assert event["content"].startswith("relayprobe publish test")
