# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Route uploads to local public storage or the blob store.

Files larger than the local limit, and video files, go to blob storage.
Everything else is written under the public directory and served from
``/{target_path}``.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from learning_adventures.core.config import StorageSettings, get_settings
from learning_adventures.infrastructure.storage.blob import BlobStorageClient
from learning_adventures.infrastructure.storage.safe_zip import resolve_inside

logger = logging.getLogger(__name__)

BLOB_EXTENSIONS = frozenset({".mp4", ".webm", ".mov", ".avi", ".mkv"})


class PathTraversalError(Exception):
    """Target path resolves outside the public directory."""

    def __init__(self, target_path: str):
        self.target_path = target_path
        super().__init__("Security Error: Path traversal detected")


@dataclass(frozen=True)
class StoredFile:
    url: str
    storage_type: Literal["LOCAL", "BLOB"]


def should_use_blob_storage(filename: str, size: int, settings: StorageSettings | None = None) -> bool:
    settings = settings or get_settings().storage
    return size > settings.local_max_size or Path(filename).suffix.lower() in BLOB_EXTENSIONS


def resolve_public_path(target_path: str, settings: StorageSettings | None = None) -> Path:
    """Absolute path of ``target_path`` inside the public directory.

    Raises:
        PathTraversalError: If the path escapes the public directory.
    """
    settings = settings or get_settings().storage
    resolved = resolve_inside(Path(settings.public_dir), target_path)
    if resolved is None:
        raise PathTraversalError(target_path)
    return resolved


def write_public_file(target_path: str, data: bytes, settings: StorageSettings | None = None) -> Path:
    destination = resolve_public_path(target_path, settings)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(data)
    return destination


async def route_file_upload(
    filename: str,
    data: bytes,
    target_path: str,
    settings: StorageSettings | None = None,
    blob_client: BlobStorageClient | None = None,
) -> StoredFile:
    """Store an uploaded file locally or in blob storage.

    Args:
        filename: Original file name, used for the extension check.
        data: File contents.
        target_path: Desired path relative to the public directory.
        settings: Storage settings override.
        blob_client: Blob client override.

    Returns:
        The public URL and which storage was used.

    Raises:
        PathTraversalError: If ``target_path`` escapes the public directory.
        BlobStorageError: If the blob upload fails.
    """
    settings = settings or get_settings().storage
    destination = resolve_public_path(target_path, settings)

    if should_use_blob_storage(filename, len(data), settings):
        client = blob_client or BlobStorageClient(
            settings.blob_api_url,
            settings.blob_token.get_secret_value() if settings.blob_token else None,
        )
        url = await client.upload(target_path, data)
        return StoredFile(url=url, storage_type="BLOB")

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(data)
    logger.info("Stored upload locally: %s (%d bytes)", target_path, len(data))
    return StoredFile(url=f"/{target_path}", storage_type="LOCAL")
