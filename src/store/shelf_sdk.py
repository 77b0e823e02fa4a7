"""Python SDK for archive cache operations.

This module wires configuration, extractor, snapshot store, index
manager and mutation service into one client object.
"""

from __future__ import annotations

from pathlib import Path

from core.config import ShelfConfig
from core.types import MutationOutcome, PackageDescriptor, SnapshotLocation
from ingest.metadata_extractor import HeaderMetadataExtractor, MetadataExtractor
from store.archive_index import ArchiveIndex
from store.index_manager import IndexManager
from store.mutation_service import MutationService
from store.snapshot_store import SnapshotStore


class ShelfClient:
    """Primary SDK entry point for the archive cache."""

    def __init__(
        self,
        config: ShelfConfig | None = None,
        extractor: MetadataExtractor | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            extractor: Optional metadata extractor override.
        """
        self._config = config or ShelfConfig.from_env()
        self._store = SnapshotStore(self._config.snapshot_dir)
        self._manager = IndexManager(
            package_root=self._config.package_root,
            store=self._store,
            extractor=extractor or HeaderMetadataExtractor(),
            scan_workers=self._config.scan_workers,
        )
        self._mutations = MutationService(self._manager)
        self._manager.warm_start()

    @property
    def config(self) -> ShelfConfig:
        return self._config

    def rescan(self) -> str:
        """Rebuild the index from the package store.

        Returns:
            Created snapshot id.

        Raises:
            ShelfScanError: If the package root is missing.
            ShelfStoreError: If snapshot persistence fails.
        """
        return self._manager.rebuild()

    def resolve_newest(self) -> SnapshotLocation:
        """Resolve the newest snapshot for delivery.

        Raises:
            ShelfNoSnapshotError: If the index was never written.
        """
        return self._store.resolve_newest()

    def newest_reference(self) -> str:
        """Build the delivery reference for the newest snapshot."""
        return self.resolve_newest().reference(self._config.base_url)

    def load_newest(self) -> ArchiveIndex:
        """Load the index content of the newest snapshot."""
        _, index = self._store.load_newest()
        return index

    def list_snapshots(self) -> list[str]:
        return self._store.list_snapshot_ids()

    def current_index(self) -> ArchiveIndex:
        """Return a copy of the in-memory index."""
        return self._manager.view()

    def publish(self, descriptor: PackageDescriptor) -> str:
        return self._mutations.publish(descriptor)

    def purge(self, name: str) -> str:
        return self._mutations.purge(name)

    def publish_request(self, payload: str) -> MutationOutcome:
        """Publish a serialized descriptor, reporting failure as an outcome."""
        return self._mutations.handle_publish_request(payload)

    def purge_request(self, name: str) -> MutationOutcome:
        """Purge a package, reporting failure as an outcome."""
        return self._mutations.handle_purge_request(name)

    def with_package_root(self, package_root: str) -> "ShelfClient":
        """Clone the client against a different package store.

        Args:
            package_root: New package store root.

        Returns:
            New SDK client instance.
        """
        return ShelfClient(self._config.with_package_root(Path(package_root)))
