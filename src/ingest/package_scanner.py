"""Package store traversal.

This module walks ``root/<name>/<version>/<name>-<version>.<ext>`` and
yields typed candidates. Unexpected shapes are skipped so one bad entry
never hides the rest of the store.
"""

from __future__ import annotations

from pathlib import Path
from typing import Collection, Iterable

from core.constants import (
    ARCHIVE_EXTENSION,
    SINGLE_FILE_EXTENSION,
    SOURCE_CONTROL_DIR_NAMES,
)
from core.errors import ShelfScanError
from core.logging_config import get_logger
from core.types import PackageCandidate, PackageKind

_LOGGER = get_logger(__name__)

_KIND_BY_EXTENSION: dict[str, PackageKind] = {
    SINGLE_FILE_EXTENSION: "single",
    ARCHIVE_EXTENSION: "tar",
}


def detect_kind(file_name: str) -> tuple[str, PackageKind] | None:
    """Detect package format from a file name.

    Args:
        file_name: Bare file name.

    Returns:
        Pair of matched extension and kind, or None when unsupported.
    """
    for extension, kind in _KIND_BY_EXTENSION.items():
        if file_name.endswith(extension):
            return extension, kind
    return None


def scan_package_store(
    package_root: Path,
    names: Collection[str] | None = None,
    excluded_names: Iterable[str] = (),
) -> list[PackageCandidate]:
    """Collect candidate package files under a store root.

    Args:
        package_root: Package store root directory.
        names: Optional package names to restrict the scan to.
        excluded_names: Extra root-level entries to ignore, such as
            the snapshot directory.

    Returns:
        Candidates ordered by package, version, and file name.
    """
    skipped_roots = set(SOURCE_CONTROL_DIR_NAMES) | set(excluded_names)
    candidates: list[PackageCandidate] = []
    for package_dir in _safe_children(package_root):
        if package_dir.name in skipped_roots or not package_dir.is_dir():
            continue
        if names is not None and package_dir.name not in names:
            continue
        for version_dir in _safe_children(package_dir):
            if not version_dir.is_dir():
                continue
            candidates.extend(_scan_version_dir(package_dir.name, version_dir))
    _LOGGER.debug(
        "package_store_scanned",
        package_root=str(package_root),
        restricted_to=sorted(names) if names is not None else None,
        candidate_count=len(candidates),
    )
    return candidates


def _scan_version_dir(package_name: str, version_dir: Path) -> list[PackageCandidate]:
    """Collect candidates from one version directory.

    Args:
        package_name: Name taken from the package directory.
        version_dir: ``root/<name>/<version>`` directory.

    Returns:
        Candidates whose file names match the layout.
    """
    expected_stem = f"{package_name}-{version_dir.name}"
    candidates: list[PackageCandidate] = []
    for file_path in _safe_children(version_dir):
        detected = detect_kind(file_path.name)
        if detected is None or not file_path.is_file():
            continue
        extension, kind = detected
        if file_path.name != f"{expected_stem}{extension}":
            _LOGGER.debug("candidate_skipped", path=str(file_path), reason="name_mismatch")
            continue
        candidates.append(
            PackageCandidate(
                path=file_path.resolve(),
                extension=extension,
                kind=kind,
                package_name=package_name,
                version_label=version_dir.name,
            )
        )
    return candidates


def _safe_children(directory: Path) -> list[Path]:
    """List a directory, recovering locally when it cannot be read.

    Args:
        directory: Directory to list.

    Returns:
        Sorted child paths, empty when the directory is unreadable.
    """
    try:
        return _list_directory(directory)
    except ShelfScanError as error:
        _LOGGER.warning("scan_entry_skipped", path=str(directory), error=str(error))
        return []


def _list_directory(directory: Path) -> list[Path]:
    """List a directory in stable order.

    Args:
        directory: Directory to list.

    Returns:
        Sorted child paths.

    Raises:
        ShelfScanError: If the directory cannot be read.
    """
    try:
        return sorted(directory.iterdir(), key=lambda child: child.name)
    except OSError as error:
        raise ShelfScanError(
            f"Failed to read package store directory {directory}: {error}. "
            "Check permissions and rescan."
        ) from error
