"""Unit tests for CLI command handling."""

from __future__ import annotations

import json

from cli.main import main


def test_cli_rescan_prints_snapshot_id(package_store, capsys) -> None:
    """CLI rescan should print the created snapshot id."""
    package_store.add_single("foo", "1.0")

    exit_code = main(["--package-root", str(package_store.root), "rescan"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0 and output.startswith("archive-")


def test_cli_resolve_fails_before_first_snapshot(package_store, capsys) -> None:
    """Resolve should report an uninitialized index with exit code 1."""
    exit_code = main(["--package-root", str(package_store.root), "resolve"])

    assert exit_code == 1 and "No index snapshot" in capsys.readouterr().err


def test_cli_show_lists_newest_entries(package_store, capsys) -> None:
    """Show should print one line per indexed package."""
    package_store.add_single("foo", "1.2", summary="Foo helpers")
    main(["--package-root", str(package_store.root), "rescan"])
    capsys.readouterr()

    exit_code = main(["--package-root", str(package_store.root), "show"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0 and output == "foo\t1.2\tsingle\tFoo helpers"


def test_cli_publish_then_purge(package_store, tmp_path, capsys) -> None:
    """Publish and purge should both succeed through the CLI."""
    descriptor_file = tmp_path / "foo.json"
    descriptor_file.write_text(
        json.dumps({"name": "foo", "version": "1.1", "kind": "single"}), encoding="utf-8"
    )
    root_args = ["--package-root", str(package_store.root)]

    publish_code = main([*root_args, "publish", str(descriptor_file)])
    purge_code = main([*root_args, "purge", "foo"])
    snapshot_count = main([*root_args, "snapshots"])
    lines = capsys.readouterr().out.strip().splitlines()

    assert (publish_code, purge_code, snapshot_count) == (0, 0, 0) and len(lines) == 4


def test_cli_publish_rejects_invalid_descriptor(package_store, tmp_path) -> None:
    """Invalid descriptors should exit with a failure code."""
    descriptor_file = tmp_path / "bad.json"
    descriptor_file.write_text("{not json", encoding="utf-8")

    exit_code = main(["--package-root", str(package_store.root), "publish", str(descriptor_file)])

    assert exit_code == 1


def test_cli_rescan_reports_missing_root(tmp_path, capsys) -> None:
    """Rescan of a missing package root should exit 1 with a message."""
    missing_root = tmp_path / "absent"

    exit_code = main(["--package-root", str(missing_root), "rescan"])

    assert exit_code == 1 and "does not exist" in capsys.readouterr().err
