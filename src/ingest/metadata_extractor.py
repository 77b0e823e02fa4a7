"""Package metadata extraction.

This module turns scanned candidates into package descriptors.
Single-file packages are read statically with ``ast``; archives carry
a JSON metadata member.
"""

from __future__ import annotations

import ast
import json
import lzma
import tarfile
import zlib
from typing import Any, Protocol

from core.constants import ARCHIVE_METADATA_FILE_NAME
from core.errors import ShelfExtractionError, ShelfIndexError
from core.types import PackageCandidate, PackageDescriptor, PackageRequirement
from core.versioning import coerce_version, parse_version


class MetadataExtractor(Protocol):
    """Contract for turning a candidate file into a descriptor."""

    def extract(self, candidate: PackageCandidate) -> PackageDescriptor:
        """Extract a descriptor or raise ShelfExtractionError."""
        ...


class HeaderMetadataExtractor:
    """Default extractor reading module headers and archive metadata."""

    def extract(self, candidate: PackageCandidate) -> PackageDescriptor:
        """Extract descriptor metadata from a package file.

        Args:
            candidate: Scanned package candidate.

        Returns:
            Parsed package descriptor.

        Raises:
            ShelfExtractionError: If the file is unreadable or malformed.
        """
        try:
            if candidate.kind == "single":
                return _extract_single(candidate)
            if candidate.kind == "tar":
                return _extract_archive(candidate)
        except ShelfIndexError as error:
            raise ShelfExtractionError(
                f"Invalid metadata in {candidate.path}: {error}"
            ) from error
        raise ShelfExtractionError(
            f"Unsupported package format '{candidate.kind}' for {candidate.path}."
        )


def _extract_single(candidate: PackageCandidate) -> PackageDescriptor:
    """Read docstring, ``__version__`` and ``__requires__`` without executing."""
    try:
        source = candidate.path.read_text(encoding="utf-8")
        module = ast.parse(source, filename=str(candidate.path))
    except (OSError, UnicodeDecodeError) as error:
        raise ShelfExtractionError(
            f"Failed to read package file {candidate.path}: {error}."
        ) from error
    except SyntaxError as error:
        raise ShelfExtractionError(
            f"Malformed package header in {candidate.path}: line {error.lineno}: {error.msg}."
        ) from error
    header = _module_assignments(candidate, module)
    raw_version = header.get("__version__", candidate.version_label)
    if not isinstance(raw_version, str):
        raise ShelfExtractionError(
            f"Malformed package header in {candidate.path}: __version__ must be a string."
        )
    return PackageDescriptor(
        name=candidate.package_name,
        version=parse_version(raw_version),
        requirements=_parse_requirements(candidate, header.get("__requires__", [])),
        summary=_first_line(ast.get_docstring(module) or ""),
        kind="single",
    )


def _module_assignments(candidate: PackageCandidate, module: ast.Module) -> dict[str, Any]:
    """Collect literal dunder assignments at module level."""
    header: dict[str, Any] = {}
    for node in module.body:
        if not isinstance(node, ast.Assign) or len(node.targets) != 1:
            continue
        target = node.targets[0]
        if not isinstance(target, ast.Name) or target.id not in ("__version__", "__requires__"):
            continue
        try:
            header[target.id] = ast.literal_eval(node.value)
        except (ValueError, TypeError, SyntaxError) as error:
            raise ShelfExtractionError(
                f"Malformed package header in {candidate.path}: "
                f"{target.id} must be a literal value."
            ) from error
    return header


def _extract_archive(candidate: PackageCandidate) -> PackageDescriptor:
    """Read the metadata member from a tar archive."""
    payload = _read_archive_metadata(candidate)
    raw_version = payload.get("version", candidate.version_label)
    summary = payload.get("summary", "")
    if not isinstance(summary, str):
        raise ShelfExtractionError(
            f"Malformed archive metadata in {candidate.path}: summary must be a string."
        )
    return PackageDescriptor(
        name=_archive_name(candidate, payload.get("name", candidate.package_name)),
        version=coerce_version(raw_version),
        requirements=_parse_requirements(candidate, payload.get("requires", [])),
        summary=_first_line(summary),
        kind="tar",
    )


def _read_archive_metadata(candidate: PackageCandidate) -> dict[str, Any]:
    """Load the JSON metadata member at archive root or one level deep."""
    try:
        with tarfile.open(candidate.path) as archive:
            member = _find_metadata_member(archive)
            if member is None:
                raise ShelfExtractionError(
                    f"Archive {candidate.path} has no {ARCHIVE_METADATA_FILE_NAME} member."
                )
            stream = archive.extractfile(member)
            if stream is None:
                raise ShelfExtractionError(
                    f"Archive member {member.name} in {candidate.path} is not a regular file."
                )
            raw_payload = stream.read()
    except (OSError, EOFError, tarfile.TarError, zlib.error, lzma.LZMAError) as error:
        raise ShelfExtractionError(
            f"Failed to read package archive {candidate.path}: {error}."
        ) from error
    try:
        payload = json.loads(raw_payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise ShelfExtractionError(
            f"Malformed archive metadata in {candidate.path}: {error}."
        ) from error
    if not isinstance(payload, dict):
        raise ShelfExtractionError(
            f"Malformed archive metadata in {candidate.path}: expected JSON object."
        )
    return payload


def _archive_name(candidate: PackageCandidate, raw_name: object) -> str:
    """Require the declared name to match the package directory."""
    if not isinstance(raw_name, str):
        raise ShelfExtractionError(
            f"Malformed archive metadata in {candidate.path}: name must be a string."
        )
    if raw_name != candidate.package_name:
        raise ShelfExtractionError(
            f"Archive {candidate.path} declares name '{raw_name}' but is stored under "
            f"'{candidate.package_name}'. Move the archive or fix its metadata."
        )
    return raw_name


def _find_metadata_member(archive: tarfile.TarFile) -> tarfile.TarInfo | None:
    for member in archive.getmembers():
        parts = member.name.strip("/").split("/")
        if parts[-1] == ARCHIVE_METADATA_FILE_NAME and len(parts) <= 2:
            return member
    return None


def _parse_requirements(
    candidate: PackageCandidate, raw_requirements: object
) -> tuple[PackageRequirement, ...]:
    """Validate a list of ``(name, constraint)`` pairs."""
    if not isinstance(raw_requirements, (list, tuple)):
        raise ShelfExtractionError(
            f"Malformed requirements in {candidate.path}: expected a list of pairs."
        )
    requirements: list[PackageRequirement] = []
    for item in raw_requirements:
        if (
            not isinstance(item, (list, tuple))
            or len(item) != 2
            or not all(isinstance(part, str) for part in item)
        ):
            raise ShelfExtractionError(
                f"Malformed requirement {item!r} in {candidate.path}: "
                "expected a (name, constraint) pair of strings."
            )
        requirements.append(PackageRequirement(name=item[0], constraint=item[1]))
    return tuple(requirements)


def _first_line(text: str) -> str:
    stripped = text.strip()
    return stripped.splitlines()[0].strip() if stripped else ""
