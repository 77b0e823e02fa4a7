"""Runtime configuration model for Shelf.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_PACKAGE_ROOT,
    DEFAULT_SCAN_WORKERS,
    SNAPSHOT_DIR_NAME,
)
from core.errors import ShelfConfigError


@dataclass(frozen=True)
class ShelfConfig:
    """Validated runtime configuration.

    Attributes:
        package_root: Root directory of the package store.
        snapshot_dir: Directory holding immutable index snapshots.
        scan_workers: Thread pool size for metadata extraction.
        base_url: Base used when building snapshot location references.
    """

    package_root: Path
    snapshot_dir: Path
    scan_workers: int
    base_url: str

    @classmethod
    def from_env(cls) -> "ShelfConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ShelfConfigError: If environment values are invalid.
        """
        package_root_value = os.getenv("SHELF_PACKAGE_ROOT", str(DEFAULT_PACKAGE_ROOT))
        package_root = Path(package_root_value).expanduser().resolve()
        snapshot_dir_value = os.getenv("SHELF_SNAPSHOT_DIR")
        if snapshot_dir_value:
            snapshot_dir = Path(snapshot_dir_value).expanduser().resolve()
        else:
            snapshot_dir = package_root / SNAPSHOT_DIR_NAME
        scan_workers = _parse_scan_workers(
            os.getenv("SHELF_SCAN_WORKERS", str(DEFAULT_SCAN_WORKERS))
        )
        return cls(
            package_root=package_root,
            snapshot_dir=snapshot_dir,
            scan_workers=scan_workers,
            base_url=os.getenv("SHELF_BASE_URL", DEFAULT_BASE_URL),
        )

    def with_package_root(self, package_root: Path) -> "ShelfConfig":
        """Return a copy rooted at another package store.

        The snapshot directory follows the new root unless it was placed
        outside the previous root explicitly.

        Args:
            package_root: New package store root.

        Returns:
            Updated config object.
        """
        resolved_root = package_root.expanduser().resolve()
        snapshot_dir = self.snapshot_dir
        if snapshot_dir == self.package_root / SNAPSHOT_DIR_NAME:
            snapshot_dir = resolved_root / SNAPSHOT_DIR_NAME
        return ShelfConfig(
            package_root=resolved_root,
            snapshot_dir=snapshot_dir,
            scan_workers=self.scan_workers,
            base_url=self.base_url,
        )


def _parse_scan_workers(raw_value: str) -> int:
    """Parse the scan worker count environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive worker count.

    Raises:
        ShelfConfigError: If value is not a positive integer.
    """
    try:
        workers = int(raw_value)
    except ValueError as error:
        raise ShelfConfigError(
            "Invalid SHELF_SCAN_WORKERS value: "
            f"expected integer, got '{raw_value}'. "
            "Set SHELF_SCAN_WORKERS to a positive number."
        ) from error
    if workers < 1:
        raise ShelfConfigError(
            f"Invalid SHELF_SCAN_WORKERS value: expected at least 1, got {workers}. "
            "Set SHELF_SCAN_WORKERS to a positive number."
        )
    return workers
