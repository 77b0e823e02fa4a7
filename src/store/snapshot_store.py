"""Immutable snapshot store.

This module persists archive indexes as timestamp-named files forming an
append-only timeline. The newest snapshot is the lexicographic maximum
filename, which holds because stamps are fixed-width and zero-padded.
"""

from __future__ import annotations

import os
import re
import threading
import time
from pathlib import Path
from typing import Callable
from uuid import uuid4

from core.constants import (
    SNAPSHOT_FILE_PREFIX,
    SNAPSHOT_STAMP_WIDTH,
    SNAPSHOT_TEMP_PREFIX,
    SNAPSHOT_WRITE_ATTEMPTS,
)
from core.errors import ShelfNoSnapshotError, ShelfStoreError
from core.logging_config import get_logger
from core.types import SnapshotLocation
from store.archive_index import ArchiveIndex
from store.snapshot_codec import decode_index, encode_index

_LOGGER = get_logger(__name__)

_SNAPSHOT_NAME_PATTERN = re.compile(
    rf"^{re.escape(SNAPSHOT_FILE_PREFIX)}(\d{{{SNAPSHOT_STAMP_WIDTH}}})$"
)

Clock = Callable[[], int]
FileLister = Callable[[Path], list[str]]


class SnapshotStore:
    """Append-only store of index snapshots.

    The clock and file lister are injectable so the timeline can be
    exercised without real time or a real directory listing.
    """

    def __init__(
        self,
        snapshot_dir: Path,
        clock: Clock = time.time_ns,
        lister: FileLister | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            snapshot_dir: Directory holding snapshot files.
            clock: Nanosecond timestamp source.
            lister: Returns file names in a directory.
        """
        self._snapshot_dir = snapshot_dir
        self._clock = clock
        self._lister = lister or _list_file_names
        self._last_stamp = -1
        self._stamp_lock = threading.Lock()

    @property
    def snapshot_dir(self) -> Path:
        return self._snapshot_dir

    def write(self, index: ArchiveIndex) -> str:
        """Persist an index under a fresh, strictly increasing name.

        Args:
            index: Index to serialize.

        Returns:
            Snapshot id (the file name).

        Raises:
            ShelfStoreError: If the snapshot cannot be written.
        """
        content = encode_index(index)
        try:
            self._snapshot_dir.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise ShelfStoreError(
                f"Failed to create snapshot directory {self._snapshot_dir}: {error}."
            ) from error
        with self._stamp_lock:
            stamp = self._next_stamp()
            for _ in range(SNAPSHOT_WRITE_ATTEMPTS):
                snapshot_id = snapshot_name(stamp)
                target_path = self._snapshot_dir / snapshot_id
                if not target_path.exists():
                    _write_atomically(target_path, content)
                    self._last_stamp = stamp
                    _LOGGER.info(
                        "snapshot_written",
                        snapshot_id=snapshot_id,
                        package_count=len(index),
                    )
                    return snapshot_id
                stamp += 1
        raise ShelfStoreError(
            f"Failed to allocate a unique snapshot name in {self._snapshot_dir} "
            f"after {SNAPSHOT_WRITE_ATTEMPTS} attempts. Check for concurrent writers."
        )

    def list_snapshot_ids(self) -> list[str]:
        """Return snapshot ids in ascending timeline order."""
        try:
            names = self._lister(self._snapshot_dir)
        except FileNotFoundError:
            return []
        except OSError as error:
            raise ShelfStoreError(
                f"Failed to list snapshots in {self._snapshot_dir}: {error}."
            ) from error
        return sorted(name for name in names if _SNAPSHOT_NAME_PATTERN.match(name))

    def resolve_newest(self) -> SnapshotLocation:
        """Resolve the newest snapshot.

        Returns:
            Location with path and trailing version tag.

        Raises:
            ShelfNoSnapshotError: If no snapshot has been written yet.
        """
        snapshot_ids = self.list_snapshot_ids()
        if not snapshot_ids:
            raise ShelfNoSnapshotError(
                f"No index snapshot exists in {self._snapshot_dir}. "
                "Run a full rescan to initialize the index."
            )
        return self._location(snapshot_ids[-1])

    def load(self, snapshot_id: str) -> ArchiveIndex:
        """Load a snapshot by id.

        Raises:
            ShelfStoreError: If the snapshot is missing or unreadable.
            ShelfCodecError: If the content is malformed.
        """
        if not _SNAPSHOT_NAME_PATTERN.match(snapshot_id):
            raise ShelfStoreError(f"Invalid snapshot id '{snapshot_id}'.")
        snapshot_path = self._snapshot_dir / snapshot_id
        try:
            text = snapshot_path.read_text(encoding="utf-8")
        except FileNotFoundError as error:
            raise ShelfStoreError(
                f"Snapshot '{snapshot_id}' not found in {self._snapshot_dir}. "
                "Use list_snapshot_ids to discover valid ids."
            ) from error
        except OSError as error:
            raise ShelfStoreError(f"Failed to read snapshot {snapshot_path}: {error}.") from error
        return decode_index(text)

    def load_newest(self) -> tuple[SnapshotLocation, ArchiveIndex]:
        """Resolve and load the newest snapshot."""
        location = self.resolve_newest()
        return location, self.load(location.snapshot_id)

    def _next_stamp(self) -> int:
        """Return a stamp above the clock, the last write, and the disk."""
        existing = self.list_snapshot_ids()
        newest_on_disk = snapshot_stamp(existing[-1]) if existing else -1
        return max(self._clock(), self._last_stamp + 1, newest_on_disk + 1)

    def _location(self, snapshot_id: str) -> SnapshotLocation:
        return SnapshotLocation(
            path=self._snapshot_dir / snapshot_id,
            version_tag=f"{snapshot_stamp(snapshot_id):0{SNAPSHOT_STAMP_WIDTH}d}",
        )


def snapshot_name(stamp: int) -> str:
    """Build the fixed-width snapshot file name for a stamp."""
    if stamp < 0 or len(str(stamp)) > SNAPSHOT_STAMP_WIDTH:
        raise ShelfStoreError(f"Snapshot stamp {stamp} does not fit the filename format.")
    return f"{SNAPSHOT_FILE_PREFIX}{stamp:0{SNAPSHOT_STAMP_WIDTH}d}"


def snapshot_stamp(snapshot_id: str) -> int:
    """Return the integer stamp of a snapshot id."""
    match = _SNAPSHOT_NAME_PATTERN.match(snapshot_id)
    if match is None:
        raise ShelfStoreError(f"Invalid snapshot id '{snapshot_id}'.")
    return int(match.group(1))


def _list_file_names(directory: Path) -> list[str]:
    return [entry.name for entry in directory.iterdir() if entry.is_file()]


def _write_atomically(target_path: Path, content: str) -> None:
    """Write to a hidden temporary file, then rename into place.

    Raises:
        ShelfStoreError: If writing or renaming fails.
    """
    temp_path = target_path.with_name(f"{SNAPSHOT_TEMP_PREFIX}{target_path.name}-{uuid4().hex}")
    try:
        with temp_path.open("w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, target_path)
    except OSError as error:
        temp_path.unlink(missing_ok=True)
        raise ShelfStoreError(
            f"Failed to write snapshot {target_path}: {error}. "
            "Previous snapshots remain current."
        ) from error
