"""In-memory archive index.

This module holds the name-deduplicated mapping of the best-known
descriptor per package and owns the version-dominance merge rule.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from core.types import PackageDescriptor
from core.versioning import is_newer


class ArchiveIndex:
    """Mapping from package name to its best-known descriptor.

    Scan-sourced descriptors go through :meth:`merge`, which only ever
    raises the stored version. Authoritative publishes use :meth:`upsert`.
    When two merged descriptors carry equal versions, the first one
    observed is kept.
    """

    def __init__(self, descriptors: Iterable[PackageDescriptor] = ()) -> None:
        self._entries: dict[str, PackageDescriptor] = {}
        self.merge_all(descriptors)

    def merge(self, descriptor: PackageDescriptor) -> bool:
        """Fold one scanned descriptor into the index.

        Args:
            descriptor: Scan-sourced descriptor.

        Returns:
            True when the descriptor was inserted or replaced an entry.
        """
        current = self._entries.get(descriptor.name)
        if current is not None and not is_newer(descriptor.version, current.version):
            return False
        self._entries[descriptor.name] = descriptor
        return True

    def merge_all(self, descriptors: Iterable[PackageDescriptor]) -> int:
        """Merge descriptors in order and return how many were accepted."""
        return sum(1 for descriptor in descriptors if self.merge(descriptor))

    def upsert(self, descriptor: PackageDescriptor) -> PackageDescriptor | None:
        """Store a descriptor regardless of version ordering.

        Returns:
            The replaced descriptor, if any.
        """
        previous = self._entries.get(descriptor.name)
        self._entries[descriptor.name] = descriptor
        return previous

    def remove(self, name: str) -> PackageDescriptor | None:
        """Drop the entry for ``name`` and return it when present."""
        return self._entries.pop(name, None)

    def get(self, name: str) -> PackageDescriptor | None:
        return self._entries.get(name)

    def names(self) -> list[str]:
        return sorted(self._entries)

    def entries(self) -> list[PackageDescriptor]:
        """Return descriptors sorted by package name."""
        return [self._entries[name] for name in self.names()]

    def copy(self) -> "ArchiveIndex":
        clone = ArchiveIndex()
        clone._entries = dict(self._entries)
        return clone

    def replace_with(self, other: "ArchiveIndex") -> None:
        """Adopt the entries of another index in place."""
        self._entries = dict(other._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[PackageDescriptor]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArchiveIndex):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"ArchiveIndex({len(self._entries)} packages)"
