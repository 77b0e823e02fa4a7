"""Public SDK surface for Shelf.

This module provides a stable import path for library users.
It re-exports the primary client and typed models.
"""

from __future__ import annotations

from core.config import ShelfConfig
from core.types import (
    MutationOutcome,
    PackageCandidate,
    PackageDescriptor,
    PackageRequirement,
    SnapshotLocation,
)
from ingest.metadata_extractor import HeaderMetadataExtractor, MetadataExtractor
from store.archive_index import ArchiveIndex
from store.shelf_sdk import ShelfClient
from store.snapshot_codec import decode_index, encode_index

__all__ = [
    "ArchiveIndex",
    "HeaderMetadataExtractor",
    "MetadataExtractor",
    "MutationOutcome",
    "PackageCandidate",
    "PackageDescriptor",
    "PackageRequirement",
    "ShelfClient",
    "ShelfConfig",
    "SnapshotLocation",
    "decode_index",
    "encode_index",
]
