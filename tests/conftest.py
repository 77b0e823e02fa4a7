"""Pytest configuration for repository test runs."""

from __future__ import annotations

import io
import json
import os
import sys
import tarfile
from pathlib import Path
from typing import Any, Sequence

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


class PackageStoreBuilder:
    """Builds ``root/<name>/<version>/<name>-<version>.<ext>`` trees."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def add_single(
        self,
        name: str,
        version_label: str,
        version: str | None = None,
        requires: Sequence[tuple[str, str]] = (),
        summary: str = "Sample package.",
    ) -> Path:
        header = f'"""{summary}"""\n\n'
        header += f'__version__ = "{version or version_label}"\n'
        header += f"__requires__ = {list(requires)!r}\n"
        return self.add_raw(f"{name}/{version_label}/{name}-{version_label}.py", header)

    def add_archive(
        self,
        name: str,
        version_label: str,
        metadata: dict[str, Any] | None = None,
    ) -> Path:
        payload = metadata if metadata is not None else {
            "name": name,
            "version": version_label,
            "requires": [],
            "summary": "Archived package.",
        }
        path = self.root / name / version_label / f"{name}-{version_label}.tar"
        path.parent.mkdir(parents=True, exist_ok=True)
        raw = json.dumps(payload).encode("utf-8")
        with tarfile.open(path, "w") as archive:
            info = tarfile.TarInfo(f"{name}-{version_label}/METADATA.json")
            info.size = len(raw)
            archive.addfile(info, io.BytesIO(raw))
        return path

    def add_truncated_gzip_archive(self, name: str, version_label: str) -> Path:
        """Write a gzip-compressed ``.tar`` cut off halfway through."""
        raw = json.dumps({"name": name, "summary": os.urandom(32 * 1024).hex()}).encode("utf-8")
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
            info = tarfile.TarInfo(f"{name}-{version_label}/METADATA.json")
            info.size = len(raw)
            archive.addfile(info, io.BytesIO(raw))
        data = buffer.getvalue()
        path = self.root / name / version_label / f"{name}-{version_label}.tar"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data[: len(data) // 2])
        return path

    def add_raw(self, relative_path: str, content: str) -> Path:
        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path


@pytest.fixture
def package_store(tmp_path: Path) -> PackageStoreBuilder:
    """Empty package store rooted under the test temp directory."""
    return PackageStoreBuilder(tmp_path / "packages")
