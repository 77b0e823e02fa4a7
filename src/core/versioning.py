"""Package version parsing and ordering.

Versions are tuples of non-negative integers compared component by
component, with the shorter tuple padded with zeros.
"""

from __future__ import annotations

from itertools import zip_longest
from typing import Sequence

from core.errors import ShelfIndexError

PackageVersion = tuple[int, ...]


def parse_version(raw_value: str) -> PackageVersion:
    """Parse a dotted version label such as ``1.2.0``.

    Args:
        raw_value: Dotted numeric version text.

    Returns:
        Parsed version tuple.

    Raises:
        ShelfIndexError: If any component is empty or non-numeric.
    """
    components = raw_value.strip().split(".")
    if not all(component.isascii() and component.isdigit() for component in components):
        raise ShelfIndexError(
            f"Invalid package version '{raw_value}': "
            "expected dot-separated non-negative integers such as '1.2'."
        )
    return tuple(int(component) for component in components)


def coerce_version(raw_value: object) -> PackageVersion:
    """Normalize a version given as dotted text or integer sequence.

    Args:
        raw_value: Version string or sequence of integers.

    Returns:
        Validated version tuple.

    Raises:
        ShelfIndexError: If the value cannot represent a version.
    """
    if isinstance(raw_value, str):
        return parse_version(raw_value)
    if isinstance(raw_value, (list, tuple)):
        return validate_version(raw_value)
    raise ShelfIndexError(
        f"Invalid package version {raw_value!r}: expected string or integer list."
    )


def validate_version(components: Sequence[object]) -> PackageVersion:
    """Validate an integer component sequence.

    Args:
        components: Candidate version components.

    Returns:
        Version tuple.

    Raises:
        ShelfIndexError: If empty or containing non-integers or negatives.
    """
    if not isinstance(components, (list, tuple)):
        raise ShelfIndexError(
            f"Invalid package version {components!r}: expected a list of integers."
        )
    if not components:
        raise ShelfIndexError("Invalid package version: version must have at least one part.")
    for component in components:
        if isinstance(component, bool) or not isinstance(component, int) or component < 0:
            raise ShelfIndexError(
                f"Invalid package version {list(components)!r}: "
                "components must be non-negative integers."
            )
    return tuple(int(component) for component in components)


def compare_versions(left: PackageVersion, right: PackageVersion) -> int:
    """Compare two versions with zero padding.

    Returns:
        Negative, zero, or positive like a classic ``cmp``.
    """
    for left_part, right_part in zip_longest(left, right, fillvalue=0):
        if left_part != right_part:
            return -1 if left_part < right_part else 1
    return 0


def is_newer(candidate: PackageVersion, current: PackageVersion) -> bool:
    """Return whether ``candidate`` is strictly greater than ``current``."""
    return compare_versions(candidate, current) > 0


def format_version(version: PackageVersion) -> str:
    """Render a version tuple as dotted text."""
    return ".".join(str(component) for component in version)
