"""Maintenance commands for the kiosk store.

Usage:
    python -m scan_kiosk.scripts.kiosk_admin init
    python -m scan_kiosk.scripts.kiosk_admin status
    python -m scan_kiosk.scripts.kiosk_admin export --format csv
"""
from __future__ import annotations

import argparse
import json
import sys

from scan_kiosk.core.logging import configure_logging
from scan_kiosk.core.settings import Settings, settings
from scan_kiosk.services.errors import StorageError
from scan_kiosk.services.export import metrics_to_csv
from scan_kiosk.services.store import KioskStore, build_store


def cmd_init(store: KioskStore) -> None:
    """Create the tables or data files and seed the rolling token."""
    print(f"[kiosk] {store.backend} store ready, current token {store.ledger.get_current_token()}")


def cmd_status(store: KioskStore, config: Settings) -> None:
    """Print the backend, timezone and rolling token."""
    print(f"backend:       {store.backend}")
    print(f"timezone:      {config.kiosk_timezone}")
    print(f"current token: {store.ledger.get_current_token()}")
    print(f"days recorded: {len(store.metrics.rows())}")


def cmd_export(store: KioskStore, fmt: str) -> None:
    """Write the daily counters to stdout."""
    if fmt == "json":
        payload = {"tz": store.metrics.timezone, "days": store.metrics.snapshot()}
        print(json.dumps(payload, indent=2))
    else:
        sys.stdout.write(metrics_to_csv(store.metrics.rows()))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage the kiosk token and metrics store")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("init", help="Create storage and seed the rolling token")
    sub.add_parser("status", help="Show the current token and backend")
    export = sub.add_parser("export", help="Export daily counters")
    export.add_argument("--format", choices=("csv", "json"), default="csv")
    return parser


def main(argv: list[str] | None = None, config: Settings | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = config or settings
    configure_logging("WARNING")
    try:
        store = build_store(config)
        if args.command == "init":
            cmd_init(store)
        elif args.command == "status":
            cmd_status(store, config)
        else:
            cmd_export(store, args.format)
    except StorageError as exc:
        print(f"[kiosk] ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
