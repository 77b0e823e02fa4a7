"""Snapshot wire format.

Snapshot content is a JSON array whose first item is the integer format
version and whose second item lists entries sorted by package name::

    [1, [[name, [[1, 2], [[dep, constraint], ...], summary, kind]], ...]]

Clients parse this layout directly, so it must not change shape.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, cast

from core.constants import SNAPSHOT_FORMAT_VERSION
from core.errors import ShelfCodecError, ShelfIndexError
from core.types import PACKAGE_KINDS, PackageDescriptor, PackageKind, PackageRequirement
from core.versioning import coerce_version, validate_version
from store.archive_index import ArchiveIndex


def encode_index(index: ArchiveIndex) -> str:
    """Serialize an index deterministically.

    Args:
        index: Archive index to serialize.

    Returns:
        Snapshot text with a trailing newline.
    """
    entries = [[descriptor.name, _encode_entry(descriptor)] for descriptor in index.entries()]
    return json.dumps([SNAPSHOT_FORMAT_VERSION, entries], separators=(",", ":")) + "\n"


def decode_index(text: str) -> ArchiveIndex:
    """Parse snapshot text back into an index.

    Args:
        text: Snapshot file content.

    Returns:
        Decoded archive index.

    Raises:
        ShelfCodecError: If the content is not a valid snapshot.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as error:
        raise ShelfCodecError(f"Failed to parse snapshot: {error.msg}.") from error
    if not isinstance(payload, list) or len(payload) != 2:
        raise ShelfCodecError("Invalid snapshot: expected [format_version, entries].")
    format_version, raw_entries = payload
    if format_version != SNAPSHOT_FORMAT_VERSION:
        raise ShelfCodecError(
            f"Unsupported snapshot format version {format_version!r}: "
            f"expected {SNAPSHOT_FORMAT_VERSION}."
        )
    if not isinstance(raw_entries, list):
        raise ShelfCodecError("Invalid snapshot: entries must be a list.")
    index = ArchiveIndex()
    for raw_entry in raw_entries:
        index.upsert(_decode_entry(raw_entry))
    return index


def descriptor_from_payload(payload: Mapping[str, Any]) -> PackageDescriptor:
    """Build a descriptor from a publish request body.

    Args:
        payload: Mapping with ``name``, ``version``, ``requires``,
            ``summary`` and ``kind`` keys. ``version`` may be dotted text
            or an integer list.

    Returns:
        Validated package descriptor.

    Raises:
        ShelfIndexError: If any field is missing or invalid.
    """
    missing = [key for key in ("name", "version", "kind") if key not in payload]
    if missing:
        raise ShelfIndexError(f"Invalid package descriptor: missing fields {missing}.")
    name = payload["name"]
    summary = payload.get("summary", "")
    if not isinstance(name, str) or not isinstance(summary, str):
        raise ShelfIndexError("Invalid package descriptor: name and summary must be strings.")
    return PackageDescriptor(
        name=name,
        version=coerce_version(payload["version"]),
        requirements=_decode_requirements(payload.get("requires", [])),
        summary=summary,
        kind=_decode_kind(payload["kind"]),
    )


def descriptor_to_payload(descriptor: PackageDescriptor) -> dict[str, Any]:
    """Render a descriptor as a publish request body."""
    return {
        "name": descriptor.name,
        "version": list(descriptor.version),
        "requires": [[item.name, item.constraint] for item in descriptor.requirements],
        "summary": descriptor.summary,
        "kind": descriptor.kind,
    }


def _encode_entry(descriptor: PackageDescriptor) -> list[Any]:
    return [
        list(descriptor.version),
        [[item.name, item.constraint] for item in descriptor.requirements],
        descriptor.summary,
        descriptor.kind,
    ]


def _decode_entry(raw_entry: object) -> PackageDescriptor:
    """Decode one ``[name, [version, requirements, summary, kind]]`` entry."""
    if not isinstance(raw_entry, list) or len(raw_entry) != 2:
        raise ShelfCodecError(f"Invalid snapshot entry {raw_entry!r}: expected [name, fields].")
    name, fields = raw_entry
    if not isinstance(name, str) or not isinstance(fields, list) or len(fields) != 4:
        raise ShelfCodecError(
            f"Invalid snapshot entry {raw_entry!r}: "
            "expected [version, requirements, summary, kind]."
        )
    raw_version, raw_requirements, summary, raw_kind = fields
    if not isinstance(raw_version, list) or not isinstance(summary, str):
        raise ShelfCodecError(f"Invalid snapshot fields for {name}: {fields!r}.")
    try:
        return PackageDescriptor(
            name=name,
            version=validate_version(raw_version),
            requirements=_decode_requirements(raw_requirements),
            summary=summary,
            kind=_decode_kind(raw_kind),
        )
    except ShelfIndexError as error:
        raise ShelfCodecError(f"Invalid snapshot entry for {name}: {error}") from error


def _decode_requirements(raw_requirements: object) -> tuple[PackageRequirement, ...]:
    if not isinstance(raw_requirements, list):
        raise ShelfIndexError("Invalid requirements: expected a list of pairs.")
    requirements: list[PackageRequirement] = []
    for item in raw_requirements:
        if (
            not isinstance(item, list)
            or len(item) != 2
            or not all(isinstance(part, str) for part in item)
        ):
            raise ShelfIndexError(
                f"Invalid requirement {item!r}: expected [name, constraint] strings."
            )
        requirements.append(PackageRequirement(name=item[0], constraint=item[1]))
    return tuple(requirements)


def _decode_kind(raw_kind: object) -> PackageKind:
    if raw_kind not in PACKAGE_KINDS:
        raise ShelfIndexError(f"Invalid package kind {raw_kind!r}: expected one of {PACKAGE_KINDS}.")
    return cast(PackageKind, raw_kind)
