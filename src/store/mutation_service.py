"""Authoritative publish and purge mutations.

Publish bypasses the version-dominance rule used for scans: an explicit
publish event replaces the stored entry even with a lower version. Purge
removes an entry and then reconciles it against the package store.
"""

from __future__ import annotations

import json

from core.errors import ShelfError, ShelfMutationError
from core.logging_config import get_logger
from core.types import MutationOutcome, PackageDescriptor
from core.versioning import format_version
from store.archive_index import ArchiveIndex
from store.index_manager import IndexManager
from store.snapshot_codec import descriptor_from_payload

_LOGGER = get_logger(__name__)


class MutationService:
    """Applies publish/purge requests through the index manager."""

    def __init__(self, manager: IndexManager) -> None:
        self._manager = manager

    def publish(self, descriptor: PackageDescriptor) -> str:
        """Upsert a descriptor unconditionally and write a snapshot.

        Args:
            descriptor: Authoritative package descriptor.

        Returns:
            Snapshot id written after the mutation.

        Raises:
            ShelfMutationError: If the snapshot write fails.
        """

        def _upsert(index: ArchiveIndex) -> None:
            index.upsert(descriptor)

        try:
            snapshot_id = self._manager.apply(_upsert)
        except ShelfError as error:
            raise ShelfMutationError(
                f"Failed to publish {descriptor.name} "
                f"{format_version(descriptor.version)}: {error}"
            ) from error
        _LOGGER.info(
            "package_published",
            name=descriptor.name,
            version=format_version(descriptor.version),
            kind=descriptor.kind,
            snapshot_id=snapshot_id,
        )
        return snapshot_id

    def purge(self, name: str) -> str:
        """Remove an entry, reconcile with the store, and write a snapshot.

        A version still present on disk for ``name`` is merged back so the
        index does not claim an absence the filesystem contradicts.

        Args:
            name: Package name to purge.

        Returns:
            Snapshot id written after the mutation.

        Raises:
            ShelfMutationError: If the reconciling rescan or the snapshot
                write fails.
        """
        restored: list[PackageDescriptor] = []

        def _remove_and_reconcile(index: ArchiveIndex) -> None:
            index.remove(name)
            for descriptor in self._manager.scan(names={name}, strict=True):
                if descriptor.name == name and index.merge(descriptor):
                    restored[:] = [descriptor]

        try:
            snapshot_id = self._manager.apply(_remove_and_reconcile)
        except ShelfError as error:
            raise ShelfMutationError(f"Failed to purge {name}: {error}") from error
        _LOGGER.info(
            "package_purged",
            name=name,
            restored_version=format_version(restored[0].version) if restored else None,
            snapshot_id=snapshot_id,
        )
        return snapshot_id

    def handle_publish_request(self, payload: str) -> MutationOutcome:
        """Publish a JSON-serialized descriptor for the boundary layer.

        Args:
            payload: JSON object with name, version, requires, summary, kind.

        Returns:
            Outcome distinguishing success from failure.
        """
        try:
            descriptor = _parse_publish_payload(payload)
            snapshot_id = self.publish(descriptor)
        except ShelfMutationError as error:
            _LOGGER.warning("publish_rejected", error=str(error))
            return MutationOutcome(ok=False, message=str(error))
        return MutationOutcome(
            ok=True,
            message=f"published {descriptor.name} {format_version(descriptor.version)}",
            snapshot_id=snapshot_id,
        )

    def handle_purge_request(self, name: str) -> MutationOutcome:
        """Purge a package for the boundary layer.

        Returns:
            Outcome distinguishing success from failure.
        """
        try:
            snapshot_id = self.purge(name)
        except ShelfMutationError as error:
            _LOGGER.warning("purge_rejected", name=name, error=str(error))
            return MutationOutcome(ok=False, message=str(error))
        return MutationOutcome(ok=True, message=f"purged {name}", snapshot_id=snapshot_id)


def _parse_publish_payload(payload: str) -> PackageDescriptor:
    """Decode a publish request body.

    Raises:
        ShelfMutationError: If the body is not a valid descriptor.
    """
    try:
        raw_payload = json.loads(payload)
    except json.JSONDecodeError as error:
        raise ShelfMutationError(f"Invalid publish payload: {error.msg}.") from error
    if not isinstance(raw_payload, dict):
        raise ShelfMutationError("Invalid publish payload: expected a JSON object.")
    try:
        return descriptor_from_payload(raw_payload)
    except ShelfError as error:
        raise ShelfMutationError(f"Invalid publish payload: {error}") from error
