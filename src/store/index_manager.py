"""Owned archive index with serialized mutation.

This module is the single owner of the in-memory archive index. Every
mutation and the snapshot write it triggers run as one critical section,
so no snapshot ever reflects a torn intermediate state.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Collection

from core.errors import ShelfCodecError, ShelfNoSnapshotError, ShelfScanError
from core.logging_config import get_logger
from core.types import PackageDescriptor
from ingest.metadata_extractor import MetadataExtractor
from ingest.scan_pipeline import scan_descriptors
from store.archive_index import ArchiveIndex
from store.snapshot_store import SnapshotStore

_LOGGER = get_logger(__name__)

IndexMutation = Callable[[ArchiveIndex], None]


class IndexManager:
    """Mutex-guarded handle to the archive index and its snapshot store."""

    def __init__(
        self,
        package_root: Path,
        store: SnapshotStore,
        extractor: MetadataExtractor,
        scan_workers: int = 1,
    ) -> None:
        self._package_root = package_root
        self._store = store
        self._extractor = extractor
        self._scan_workers = scan_workers
        self._index = ArchiveIndex()
        self._lock = threading.RLock()

    @property
    def store(self) -> SnapshotStore:
        return self._store

    def view(self) -> ArchiveIndex:
        """Return a copy of the current index for read-only use."""
        with self._lock:
            return self._index.copy()

    def scan(
        self,
        names: Collection[str] | None = None,
        strict: bool = False,
    ) -> list[PackageDescriptor]:
        """Scan the package store without touching the index.

        Args:
            names: Optional package names to restrict the scan to.
            strict: Propagate extraction failures instead of dropping them.

        Returns:
            Extracted descriptors in scan order.
        """
        return scan_descriptors(
            self._package_root,
            self._extractor,
            max_workers=self._scan_workers,
            names=names,
            excluded_names=self._excluded_root_names(),
            strict=strict,
        )

    def rebuild(self) -> str:
        """Replace the index with a full rescan and write a snapshot.

        Scanning runs outside the lock; the swap and the write do not.

        Returns:
            Snapshot id of the written snapshot.

        Raises:
            ShelfScanError: If the package root does not exist.
            ShelfStoreError: If the snapshot cannot be written.
        """
        if not self._package_root.is_dir():
            raise ShelfScanError(
                f"Package store root {self._package_root} does not exist. "
                "Set SHELF_PACKAGE_ROOT to an existing directory."
            )
        fresh_index = ArchiveIndex(self.scan())
        with self._lock:
            self._index.replace_with(fresh_index)
            snapshot_id = self._store.write(self._index)
        _LOGGER.info("index_rebuilt", package_count=len(fresh_index), snapshot_id=snapshot_id)
        return snapshot_id

    def warm_start(self) -> bool:
        """Load the newest snapshot into memory when one exists.

        Returns:
            True when a snapshot was loaded. An unreadable newest snapshot
            is logged and skipped so a full rescan can still recover.
        """
        try:
            location, loaded_index = self._store.load_newest()
        except ShelfNoSnapshotError:
            return False
        except ShelfCodecError as error:
            _LOGGER.warning("warm_start_skipped", error=str(error))
            return False
        with self._lock:
            self._index.replace_with(loaded_index)
        _LOGGER.info(
            "index_warm_started",
            snapshot_id=location.snapshot_id,
            package_count=len(loaded_index),
        )
        return True

    def apply(self, mutation: IndexMutation) -> str:
        """Run a mutation and the snapshot write it triggers atomically.

        If the write fails, the in-memory mutation is kept and the error
        propagates; on-disk snapshots stay stale until the next success.

        Args:
            mutation: Callable mutating the index in place.

        Returns:
            Snapshot id of the written snapshot.
        """
        with self._lock:
            mutation(self._index)
            return self._store.write(self._index)

    def _excluded_root_names(self) -> tuple[str, ...]:
        snapshot_dir = self._store.snapshot_dir
        if snapshot_dir.parent == self._package_root:
            return (snapshot_dir.name,)
        return ()
