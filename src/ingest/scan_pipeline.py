"""Scan and extraction orchestration.

This module runs metadata extraction concurrently over scanned
candidates. Extraction is read-only per file, so it runs outside the
index lock; merging happens later in the caller's critical section.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Collection, Iterable, Sequence

from core.errors import ShelfExtractionError
from core.logging_config import get_logger
from core.types import PackageCandidate, PackageDescriptor
from ingest.metadata_extractor import MetadataExtractor
from ingest.package_scanner import scan_package_store

_LOGGER = get_logger(__name__)


def extract_descriptors(
    candidates: Sequence[PackageCandidate],
    extractor: MetadataExtractor,
    max_workers: int,
    strict: bool = False,
) -> list[PackageDescriptor]:
    """Extract descriptors for candidates in candidate order.

    Args:
        candidates: Scanned package candidates.
        extractor: Metadata extractor implementation.
        max_workers: Thread pool size.
        strict: Propagate the first extraction failure instead of dropping.

    Returns:
        Descriptors for candidates that extracted cleanly.

    Raises:
        ShelfExtractionError: In strict mode, if any candidate fails.
    """
    if not candidates:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(lambda item: _extract_one(extractor, item), candidates))
    descriptors: list[PackageDescriptor] = []
    for candidate, result in zip(candidates, results):
        if isinstance(result, ShelfExtractionError):
            if strict:
                raise result
            _LOGGER.warning("extraction_failed", path=str(candidate.path), error=str(result))
            continue
        descriptors.append(result)
    return descriptors


def scan_descriptors(
    package_root: Path,
    extractor: MetadataExtractor,
    max_workers: int,
    names: Collection[str] | None = None,
    excluded_names: Iterable[str] = (),
    strict: bool = False,
) -> list[PackageDescriptor]:
    """Scan the package store and extract every candidate.

    Args:
        package_root: Package store root.
        extractor: Metadata extractor implementation.
        max_workers: Thread pool size for extraction.
        names: Optional package names to restrict the scan to.
        excluded_names: Root-level entries to ignore.
        strict: Propagate extraction failures.

    Returns:
        Extracted descriptors in scan order.
    """
    candidates = scan_package_store(package_root, names=names, excluded_names=excluded_names)
    descriptors = extract_descriptors(candidates, extractor, max_workers, strict=strict)
    _LOGGER.info(
        "scan_completed",
        package_root=str(package_root),
        candidate_count=len(candidates),
        descriptor_count=len(descriptors),
        dropped_count=len(candidates) - len(descriptors),
    )
    return descriptors


def _extract_one(
    extractor: MetadataExtractor, candidate: PackageCandidate
) -> PackageDescriptor | ShelfExtractionError:
    """Run one extraction, returning the failure instead of raising.

    Extractors are pluggable, so any exception they leak is treated as a
    failed extraction of this candidate.
    """
    try:
        return extractor.extract(candidate)
    except ShelfExtractionError as error:
        return error
    except Exception as error:
        failure = ShelfExtractionError(
            f"Extractor {type(extractor).__name__} failed on {candidate.path}: "
            f"{type(error).__name__}: {error}"
        )
        failure.__cause__ = error
        return failure
