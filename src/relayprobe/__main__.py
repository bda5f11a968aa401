"""CLI entry point for relayprobe.

Runs any probe operation against one or more relays and prints the result
as JSON on stdout. Logs go to stderr.

Exit codes: ``0`` success, ``1`` probe failure, ``2`` invalid URL or
configuration, ``130`` interrupted.

Examples:
    ```bash
    python -m relayprobe health wss://relay.damus.io
    python -m relayprobe compare wss://nos.lol wss://relay.damus.io
    python -m relayprobe publish wss://nos.lol --event signed_event.json
    python -m relayprobe stress wss://nos.lol -n 50 -d 10
    python -m relayprobe --config config/relayprobe.yaml monitor wss://nos.lol
    ```
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Any

from relayprobe.core.config import ProbeConfig
from relayprobe.core.exceptions import ConfigurationError, PublishingError, RelayProbeError
from relayprobe.core.logger import Logger, StructuredFormatter
from relayprobe.models.constants import ConnectionState
from relayprobe.models.log import LogEntry
from relayprobe.models.relay import Relay
from relayprobe.nips.nip11 import Nip11InfoMetadata
from relayprobe.probes import (
    ComplianceTester,
    HealthProbe,
    PublishCoordinator,
    RelayMonitor,
    StressRunner,
)
from relayprobe.utils.keys import build_probe_event, probe_keys


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

logger = Logger("cli")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-command per operation."""
    parser = argparse.ArgumentParser(
        prog="relayprobe",
        description="Nostr relay probe and diagnostics",
    )
    parser.add_argument("--config", type=Path, help="YAML config path (default: built-in defaults)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print compact single-line JSON instead of indented JSON",
    )

    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    for name, help_text in (
        ("health", "Connect, subscribe once and report health"),
        ("ping", "Measure connection latency"),
        ("info", "Fetch the NIP-11 relay information document"),
        ("compliance", "Score NIP-01/42/45 support and connectivity"),
        ("monitor", "Stream connection activity until the relay closes or Ctrl-C"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("urls", nargs=1, metavar="URL", help="Relay WebSocket URL")

    compare = commands.add_parser("compare", help="Score several relays concurrently")
    compare.add_argument("urls", nargs="+", metavar="URL", help="Relay WebSocket URLs")

    publish = commands.add_parser("publish", help="Publish a signed event and wait for OK")
    publish.add_argument("urls", nargs="+", metavar="URL", help="Relay WebSocket URLs")
    publish.add_argument(
        "--event",
        type=Path,
        help="JSON file with a signed event (default: sign a probe note with PRIVATE_KEY)",
    )

    stress = commands.add_parser("stress", help="Open many concurrent connections")
    stress.add_argument("urls", nargs=1, metavar="URL", help="Relay WebSocket URL")
    stress.add_argument(
        "-n", "--connections", type=int, default=10, help="Concurrent connections (default: 10)"
    )
    stress.add_argument(
        "-d", "--duration", type=float, default=10.0, help="Requested duration in s (default: 10)"
    )

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def setup_logging(level: str) -> None:
    """Configure the root logger with structured formatting on stderr.

    Installs a ``StructuredFormatter`` so that ``Logger`` output and plain
    ``logging.getLogger()`` calls in the transport and NIP modules render
    uniformly as ``level name message key=value ...``.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


def emit(payload: Any, *, compact: bool) -> None:
    """Write one JSON document to stdout."""
    indent = None if compact else 2
    sys.stdout.write(json.dumps(payload, indent=indent, default=str) + "\n")
    sys.stdout.flush()


def load_event(path: Path | None) -> dict[str, Any]:
    """Load a signed event from *path*, or sign a fresh probe note.

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON object.
    """
    if path is None:
        return build_probe_event(probe_keys(), f"relayprobe publish test {int(time.time())}")
    try:
        event = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read event file {path}: {e}") from e
    if not isinstance(event, dict):
        raise ConfigurationError(f"Event file must contain a JSON object: {path}")
    return event


async def run_monitor(url: str, config: ProbeConfig, *, compact: bool) -> int:
    """Stream a relay's activity until it closes the connection or a signal arrives."""
    interrupted = False

    def on_log(entry: LogEntry) -> None:
        emit(entry.to_dict(), compact=compact)

    def on_status_change(state: ConnectionState) -> None:
        emit({"status": state.value}, compact=compact)

    monitor = RelayMonitor(url, on_log=on_log, on_status_change=on_status_change, config=config)

    def handle_signal(sig: signal.Signals) -> None:
        nonlocal interrupted
        interrupted = True
        logger.info("shutdown_signal", signal=sig.name)
        asyncio.ensure_future(monitor.cancel())  # noqa: RUF006

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_signal, sig)

    try:
        async with monitor:
            await monitor.wait_closed()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)

    if interrupted:
        return EXIT_INTERRUPTED
    session = monitor.session
    return EXIT_OK if session is not None and session.error_count == 0 else EXIT_FAILURE


async def run_command(args: argparse.Namespace, urls: list[str], config: ProbeConfig) -> int:
    """Dispatch a parsed command and print its result.

    Raises:
        PublishingError: If any relay did not accept the published event.
        ConfigurationError: If the ``--event`` file is invalid.
    """
    compact = args.json
    command = args.command

    if command == "health":
        health = await HealthProbe(config).check(urls[0])
        emit(health.to_dict(), compact=compact)
        return EXIT_OK if health.is_healthy else EXIT_FAILURE

    if command == "ping":
        ping = await HealthProbe(config).ping(urls[0])
        emit(ping.to_dict(), compact=compact)
        return EXIT_OK if ping.success else EXIT_FAILURE

    if command == "info":
        info = await Nip11InfoMetadata.execute(
            urls[0],
            timeout=config.timeouts.info,
            max_size=config.transport.info_max_size,
            proxy_url=config.proxy_for(urls[0]),
            allow_insecure=config.transport.allow_insecure,
        )
        emit(info.to_dict(), compact=compact)
        return EXIT_OK if info.logs.success else EXIT_FAILURE

    if command == "compliance":
        compliance = await ComplianceTester(config).test_compliance(urls[0])
        emit(compliance.to_dict(), compact=compact)
        return EXIT_OK if compliance.success_rate > 0 else EXIT_FAILURE

    if command == "compare":
        compared = await ComplianceTester(config).compare(urls)
        emit([r.to_dict() for r in compared], compact=compact)
        return EXIT_OK if all(r.success_rate > 0 for r in compared) else EXIT_FAILURE

    if command == "publish":
        event = load_event(args.event)
        published = await PublishCoordinator(config).batch_publish(urls, event)
        emit([r.to_dict() for r in published], compact=compact)
        rejected = [r.relay for r in published if not r.success]
        if rejected:
            raise PublishingError(
                f"event {event.get('id')} not accepted by {len(rejected)}/{len(published)} relays"
            )
        return EXIT_OK

    if command == "stress":
        stress = await StressRunner(config).run(urls[0], args.connections, args.duration)
        emit(stress.to_dict(), compact=compact)
        return EXIT_OK if stress.failed_connections == 0 else EXIT_FAILURE

    if command == "monitor":
        return await run_monitor(urls[0], config, compact=compact)

    raise ValueError(f"Unknown command: {command}")


async def main(argv: list[str] | None = None) -> int:
    """Main entry point: parse args, load config, validate URLs and run the command."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = ProbeConfig.from_yaml(args.config) if args.config else ProbeConfig()
    except ConfigurationError as e:
        logger.error("config_invalid", error=str(e))
        return EXIT_USAGE

    try:
        urls = [Relay(url).url for url in args.urls]
    except ValueError as e:
        logger.error("invalid_url", error=str(e))
        return EXIT_USAGE

    if args.command == "stress" and (args.connections < 0 or args.duration < 0):
        logger.error("invalid_stress_args", connections=args.connections, duration=args.duration)
        return EXIT_USAGE

    try:
        return await run_command(args, urls, config)
    except RelayProbeError as e:
        logger.error(f"{args.command}_failed", error=str(e))
        return EXIT_FAILURE


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    cli()
