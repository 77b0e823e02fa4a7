"""Unit tests for the index manager."""

from __future__ import annotations

import pytest

from core.errors import ShelfScanError, ShelfStoreError
from core.types import PackageDescriptor
from ingest.metadata_extractor import HeaderMetadataExtractor
from store.archive_index import ArchiveIndex
from store.index_manager import IndexManager
from store.snapshot_store import SnapshotStore


def _manager(package_store) -> IndexManager:
    store = SnapshotStore(package_store.root / "index")
    return IndexManager(package_store.root, store, HeaderMetadataExtractor(), scan_workers=2)


def test_rebuild_keeps_greatest_scanned_version(package_store) -> None:
    """foo/1.0 and foo/1.2 on disk should index foo at 1.2."""
    package_store.add_single("foo", "1.0")
    package_store.add_single("foo", "1.2")
    manager = _manager(package_store)

    manager.rebuild()

    assert manager.view().get("foo").version == (1, 2)


def test_rebuild_writes_snapshot_matching_index(package_store) -> None:
    """The written snapshot should decode to the in-memory index."""
    package_store.add_single("foo", "1.0")
    package_store.add_archive("bar", "2.0")
    manager = _manager(package_store)

    snapshot_id = manager.rebuild()

    assert manager.store.load(snapshot_id) == manager.view()


def test_rebuild_ignores_its_own_snapshot_directory(package_store) -> None:
    """A second rebuild must not treat snapshot files as packages."""
    package_store.add_single("foo", "1.0")
    manager = _manager(package_store)
    manager.rebuild()

    manager.rebuild()

    assert manager.view().names() == ["foo"]


def test_rebuild_raises_for_missing_root(tmp_path) -> None:
    """A missing package root is an operator error, not an empty store."""
    store = SnapshotStore(tmp_path / "index")
    manager = IndexManager(tmp_path / "missing", store, HeaderMetadataExtractor())

    with pytest.raises(ShelfScanError):
        manager.rebuild()


def test_warm_start_loads_newest_snapshot(package_store) -> None:
    """A fresh manager should adopt the newest snapshot content."""
    package_store.add_single("foo", "1.0")
    _manager(package_store).rebuild()
    manager = _manager(package_store)

    loaded = manager.warm_start()

    assert loaded and manager.view().names() == ["foo"]


def test_warm_start_without_snapshot_returns_false(package_store) -> None:
    """No snapshot means nothing to load."""
    assert _manager(package_store).warm_start() is False


def test_apply_keeps_mutation_when_write_fails(package_store, monkeypatch) -> None:
    """A failed write leaves the in-memory index mutated."""
    manager = _manager(package_store)
    descriptor = PackageDescriptor(
        name="foo", version=(1,), requirements=(), summary="", kind="single"
    )

    def _failing_write(self, index: ArchiveIndex) -> str:
        raise ShelfStoreError("forced failure")

    monkeypatch.setattr(SnapshotStore, "write", _failing_write)
    with pytest.raises(ShelfStoreError):
        manager.apply(lambda index: index.upsert(descriptor))

    assert "foo" in manager.view()
