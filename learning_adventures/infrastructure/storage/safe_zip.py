# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Zip extraction guarded against path traversal ("zip slip")."""

import logging
import zipfile
from io import BytesIO
from pathlib import Path

logger = logging.getLogger(__name__)


class UnsafeArchiveError(Exception):
    """Raised when an archive entry would land outside the target directory."""

    def __init__(self, entry_name: str):
        self.entry_name = entry_name
        super().__init__(f"Security Error: Malicious zip entry detected: {entry_name}")


def resolve_inside(base: Path, relative: str) -> Path | None:
    """Resolve ``relative`` against ``base``; None if it escapes ``base``."""
    base = base.resolve()
    candidate = (base / relative).resolve()
    if candidate == base or base in candidate.parents:
        return candidate
    return None


def open_archive(data: bytes) -> zipfile.ZipFile:
    """Open an in-memory zip archive.

    Raises:
        zipfile.BadZipFile: If the bytes are not a zip archive.
    """
    return zipfile.ZipFile(BytesIO(data))


def extract_zip_safely(archive: zipfile.ZipFile, target_dir: str | Path) -> list[Path]:
    """Extract every entry of ``archive`` under ``target_dir``.

    Every entry, directory or file, is checked before anything is written
    for it; the first unsafe entry aborts extraction.

    Returns:
        Paths of the written files.

    Raises:
        UnsafeArchiveError: An entry resolves outside ``target_dir``.
    """
    target = Path(target_dir).resolve()
    target.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for info in archive.infolist():
        destination = resolve_inside(target, info.filename)
        if destination is None:
            logger.warning("Rejected zip entry outside target: %s", info.filename)
            raise UnsafeArchiveError(info.filename)

        if info.is_dir():
            destination.mkdir(parents=True, exist_ok=True)
            continue

        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(archive.read(info))
        written.append(destination)

    logger.debug("Extracted %d files to %s", len(written), target)
    return written
