"""Unit tests for version parsing and ordering."""

from __future__ import annotations

import pytest

from core.errors import ShelfIndexError
from core.versioning import coerce_version, compare_versions, is_newer, parse_version


def test_parse_version_splits_numeric_components() -> None:
    """Dotted labels should become integer tuples."""
    assert parse_version("1.10.3") == (1, 10, 3)


def test_parse_version_rejects_non_numeric_component() -> None:
    """Pre-release style labels are not valid versions."""
    with pytest.raises(ShelfIndexError):
        parse_version("1.2b1")


def test_compare_versions_pads_shorter_with_zeros() -> None:
    """Trailing zero components should not change ordering."""
    assert compare_versions((1, 2), (1, 2, 0)) == 0


def test_compare_versions_is_numeric_not_lexical() -> None:
    """Component 10 should sort above component 9."""
    assert compare_versions((1, 10), (1, 9)) > 0


def test_is_newer_requires_strictly_greater() -> None:
    """Equal versions are not newer."""
    assert is_newer((1, 0), (1,)) is False


def test_coerce_version_rejects_empty_list() -> None:
    """An empty component list violates the version invariant."""
    with pytest.raises(ShelfIndexError):
        coerce_version([])


def test_coerce_version_rejects_negative_component() -> None:
    """Components must be non-negative."""
    with pytest.raises(ShelfIndexError):
        coerce_version([1, -2])


def test_parse_version_rejects_non_ascii_digits() -> None:
    """Unicode digits such as superscripts are not version components."""
    with pytest.raises(ShelfIndexError):
        parse_version("1.²")
