"""Shelf CLI entry points.
This module exposes archive cache commands for operators.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Sequence

from core.config import ShelfConfig
from core.errors import ShelfNoSnapshotError, ShelfScanError, ShelfStoreError
from core.types import MutationOutcome
from core.versioning import format_version
from store.shelf_sdk import ShelfClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="shelf", description="Shelf archive cache CLI")
    parser.add_argument("--package-root", help="Override SHELF_PACKAGE_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("rescan", help="Rebuild the index from the package store")
    subparsers.add_parser("resolve", help="Print the newest snapshot location")
    subparsers.add_parser("show", help="List entries of the newest snapshot")
    subparsers.add_parser("snapshots", help="List snapshot ids in timeline order")
    _add_publish_command(subparsers)
    _add_purge_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Shelf CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    client = _build_client(args.package_root)
    if args.command == "rescan":
        return _run_rescan_command(client)
    if args.command == "resolve":
        return _run_resolve_command(client)
    if args.command == "show":
        return _run_show_command(client)
    if args.command == "snapshots":
        for snapshot_id in client.list_snapshots():
            print(snapshot_id)
        return 0
    if args.command == "publish":
        return _run_publish_command(client, args)
    if args.command == "purge":
        return _report_outcome(client.purge_request(args.name))
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(package_root: str | None) -> ShelfClient:
    """Build SDK client with optional package-root override.

    Args:
        package_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = ShelfConfig.from_env()
    if package_root:
        config = config.with_package_root(Path(package_root))
    return ShelfClient(config)


def _run_rescan_command(client: ShelfClient) -> int:
    """Handle rescan command.

    Args:
        client: SDK client.

    Returns:
        Exit code.
    """
    try:
        snapshot_id = client.rescan()
    except (ShelfScanError, ShelfStoreError) as error:
        print(str(error), file=sys.stderr)
        return 1
    print(snapshot_id)
    return 0


def _run_resolve_command(client: ShelfClient) -> int:
    """Handle resolve command.

    Args:
        client: SDK client.

    Returns:
        Exit code.
    """
    try:
        location = client.resolve_newest()
    except ShelfNoSnapshotError as error:
        print(str(error), file=sys.stderr)
        return 1
    print(f"{location.path}\t{location.reference(client.config.base_url)}")
    return 0


def _run_show_command(client: ShelfClient) -> int:
    """Handle show command.

    Args:
        client: SDK client.

    Returns:
        Exit code.
    """
    try:
        index = client.load_newest()
    except ShelfNoSnapshotError as error:
        print(str(error), file=sys.stderr)
        return 1
    for descriptor in index.entries():
        print(
            f"{descriptor.name}\t"
            f"{format_version(descriptor.version)}\t"
            f"{descriptor.kind}\t"
            f"{descriptor.summary or '-'}"
        )
    return 0


def _run_publish_command(client: ShelfClient, args: argparse.Namespace) -> int:
    """Handle publish command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    if args.descriptor_file == "-":
        payload = sys.stdin.read()
    else:
        payload = Path(args.descriptor_file).read_text(encoding="utf-8")
    return _report_outcome(client.publish_request(payload))


def _report_outcome(outcome: MutationOutcome) -> int:
    """Print a mutation outcome and map it to an exit code."""
    if not outcome.ok:
        print(outcome.message, file=sys.stderr)
        return 1
    print(f"{outcome.message}\t{outcome.snapshot_id}")
    return 0


def _add_publish_command(subparsers: Any) -> None:
    """Register publish subcommand."""
    parser = subparsers.add_parser("publish", help="Publish a package descriptor")
    parser.add_argument(
        "descriptor_file",
        help="JSON descriptor file with name, version, requires, summary, kind; '-' for stdin",
    )


def _add_purge_command(subparsers: Any) -> None:
    """Register purge subcommand."""
    parser = subparsers.add_parser("purge", help="Purge a package and reconcile with the store")
    parser.add_argument("name", help="Package name")
