"""Unit tests for package store traversal."""

from __future__ import annotations

from ingest.package_scanner import detect_kind, scan_package_store


def test_scan_collects_single_and_archive_candidates(package_store) -> None:
    """Scanner should detect both package formats."""
    package_store.add_single("foo", "1.0")
    package_store.add_archive("bar", "2.1")

    candidates = scan_package_store(package_store.root)

    assert [(item.package_name, item.kind) for item in candidates] == [
        ("bar", "tar"),
        ("foo", "single"),
    ]


def test_scan_skips_loose_root_files_and_source_control(package_store) -> None:
    """Root-level files and VCS directories are not packages."""
    package_store.add_single("foo", "1.0")
    package_store.add_raw("README.txt", "hello")
    package_store.add_raw(".git/objects/x/x-1.py", "")

    candidates = scan_package_store(package_store.root)

    assert [item.package_name for item in candidates] == ["foo"]


def test_scan_skips_excluded_snapshot_directory(package_store) -> None:
    """The snapshot directory should never be scanned as a package."""
    package_store.add_single("foo", "1.0")
    package_store.add_raw("index/1/index-1.py", "")

    candidates = scan_package_store(package_store.root, excluded_names=("index",))

    assert [item.package_name for item in candidates] == ["foo"]


def test_scan_skips_mismatched_file_names(package_store) -> None:
    """Files not named ``<name>-<version>.<ext>`` are ignored."""
    package_store.add_raw("foo/1.0/other-1.0.py", "")
    package_store.add_raw("foo/1.0/foo-1.0.txt", "")
    package_store.add_raw("foo/loose.py", "")

    candidates = scan_package_store(package_store.root)

    assert candidates == []


def test_scan_restricts_to_requested_names(package_store) -> None:
    """A name filter should limit the scan to those packages."""
    package_store.add_single("foo", "1.0")
    package_store.add_single("bar", "1.0")

    candidates = scan_package_store(package_store.root, names={"bar"})

    assert [item.package_name for item in candidates] == ["bar"]


def test_scan_missing_root_returns_nothing(tmp_path) -> None:
    """An unreadable root is recovered locally as an empty scan."""
    assert scan_package_store(tmp_path / "missing") == []


def test_detect_kind_rejects_unknown_extension() -> None:
    """Only the single-file and archive extensions are packages."""
    assert detect_kind("foo-1.0.zip") is None
