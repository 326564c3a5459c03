"""CLI interface for influx_exporter."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import time

from . import __version__
from .config import load_config
from .exceptions import ExporterIOError
from .exporter.settings import ConnectionSettings


def _cmd_collect(args: argparse.Namespace) -> None:
    """Collect system resources and export them to InfluxDB."""
    cfg = load_config(args.config)

    from .collector.manager import CollectorManager
    from .exporter.influx import InfluxExporter

    exporter = InfluxExporter(ConnectionSettings.from_config(cfg.influx), name=cfg.name)
    manager = CollectorManager(cfg.collector)
    manager.add_sink(exporter.add_export)

    stop = False

    def _handle_signal(_sig: int, _frame: object) -> None:
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    exporter.initialize()
    manager.start()
    print(
        f"influx_exporter running (target={exporter.settings.base_url}, "
        f"interval={cfg.collector.interval_seconds}s)"
    )
    print("Press Ctrl+C to stop.\n")
    try:
        while not stop:
            time.sleep(0.5)
    finally:
        manager.stop()
        exporter.wait_idle(timeout=exporter.settings.read_timeout_ms / 1000.0)
        exporter.shutdown()
    print("\nCollection stopped.")


def _cmd_test_connection(args: argparse.Namespace) -> None:
    """Check the configured InfluxDB connection."""
    cfg = load_config(args.config)

    from .exporter.influx import InfluxExporter

    settings = ConnectionSettings.from_config(cfg.influx)
    exporter = InfluxExporter(settings, name=cfg.name)
    try:
        print(exporter.test_connection(settings))
    except ExporterIOError as e:
        print(f"Connection to {settings.base_url} failed: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        exporter.shutdown()


def _cmd_version(_args: argparse.Namespace) -> None:
    print(f"influx_exporter {__version__}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the influx-exporter CLI."""
    parser = argparse.ArgumentParser(
        prog="influx-exporter",
        description="Export system resource snapshots to InfluxDB 1.x/2.x",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to influx_exporter.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # collect
    collect_p = sub.add_parser("collect", help="Collect resources and export to InfluxDB")
    collect_p.set_defaults(func=_cmd_collect)

    # test-connection
    test_p = sub.add_parser("test-connection", help="Check the InfluxDB connection settings")
    test_p.set_defaults(func=_cmd_test_connection)

    # version
    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
