"""Shelf exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class ShelfError(Exception):
    """Base exception for all Shelf failures."""


class ShelfConfigError(ShelfError):
    """Raised for invalid runtime configuration."""


class ShelfScanError(ShelfError):
    """Raised when the package store cannot be traversed."""


class ShelfExtractionError(ShelfError):
    """Raised for malformed, unsupported, or unreadable package files."""


class ShelfIndexError(ShelfError):
    """Raised for invalid descriptor or version values."""


class ShelfStoreError(ShelfError):
    """Raised for snapshot persistence failures."""


class ShelfNoSnapshotError(ShelfStoreError):
    """Raised when no snapshot has been written yet."""


class ShelfCodecError(ShelfStoreError):
    """Raised when snapshot content cannot be decoded."""


class ShelfMutationError(ShelfError):
    """Raised when a publish or purge request fails."""
