"""Core constants used across Shelf modules.

This module centralizes layout names, file naming, and wire-format values.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_PACKAGE_ROOT = Path("packages")
SNAPSHOT_DIR_NAME = "index"
SNAPSHOT_FILE_PREFIX = "archive-"
SNAPSHOT_STAMP_WIDTH = 20
SNAPSHOT_TEMP_PREFIX = ".tmp-"
SNAPSHOT_FORMAT_VERSION = 1
SINGLE_FILE_EXTENSION = ".py"
ARCHIVE_EXTENSION = ".tar"
ARCHIVE_METADATA_FILE_NAME = "METADATA.json"
SOURCE_CONTROL_DIR_NAMES = (".git", ".hg", ".svn", ".bzr")
DEFAULT_SCAN_WORKERS = 4
DEFAULT_BASE_URL = "/index"
SNAPSHOT_WRITE_ATTEMPTS = 16
