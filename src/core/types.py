"""Shared typed models.

This module defines immutable data models used by the scanner, index,
snapshot store, and mutation layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from core.errors import ShelfIndexError
from core.versioning import PackageVersion, validate_version

PackageKind = Literal["single", "tar"]
PACKAGE_KINDS: tuple[PackageKind, ...] = ("single", "tar")


@dataclass(frozen=True)
class PackageRequirement:
    """One dependency declared by a package.

    Attributes:
        name: Dependency package name.
        constraint: Version constraint text, kept verbatim.
    """

    name: str
    constraint: str


@dataclass(frozen=True)
class PackageDescriptor:
    """Extracted metadata for one package file.

    Attributes:
        name: Unique package identifier.
        version: Non-empty tuple of non-negative integers.
        requirements: Ordered dependency declarations.
        summary: Free-text description.
        kind: Package format tag.
    """

    name: str
    version: PackageVersion
    requirements: tuple[PackageRequirement, ...]
    summary: str
    kind: PackageKind

    def __post_init__(self) -> None:
        if not self.name:
            raise ShelfIndexError("Invalid package descriptor: name must not be empty.")
        # Frozen, so normalized fields are written through object.__setattr__.
        object.__setattr__(self, "version", validate_version(self.version))
        object.__setattr__(self, "requirements", tuple(self.requirements))
        if self.kind not in PACKAGE_KINDS:
            raise ShelfIndexError(
                f"Invalid package kind '{self.kind}' for {self.name}: "
                f"expected one of {PACKAGE_KINDS}."
            )


@dataclass(frozen=True)
class PackageCandidate:
    """Package file found by the store scanner.

    Attributes:
        path: Absolute file path.
        extension: File extension including the leading dot.
        kind: Format tag detected from the extension.
        package_name: Package directory name from the store layout.
        version_label: Version directory name from the store layout.
    """

    path: Path
    extension: str
    kind: PackageKind
    package_name: str
    version_label: str


@dataclass(frozen=True)
class SnapshotLocation:
    """Resolved newest snapshot.

    Attributes:
        path: Snapshot file path.
        version_tag: Trailing timestamp digits of the snapshot filename.
    """

    path: Path
    version_tag: str

    @property
    def snapshot_id(self) -> str:
        return self.path.name

    def reference(self, base_url: str) -> str:
        """Build the delivery reference used for client redirects."""
        return f"{base_url.rstrip('/')}/{self.version_tag}"


@dataclass(frozen=True)
class MutationOutcome:
    """Boundary-layer result for publish and purge requests.

    Attributes:
        ok: Whether the mutation and its snapshot write succeeded.
        message: Human-readable status or failure reason.
        snapshot_id: Snapshot written by a successful mutation.
    """

    ok: bool
    message: str
    snapshot_id: str | None = None
