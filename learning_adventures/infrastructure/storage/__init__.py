# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""File storage: safe zip extraction, local public files and blob uploads."""

from learning_adventures.infrastructure.storage.blob import BlobStorageClient, BlobStorageError
from learning_adventures.infrastructure.storage.router import (
    BLOB_EXTENSIONS,
    PathTraversalError,
    StoredFile,
    resolve_public_path,
    route_file_upload,
    should_use_blob_storage,
    write_public_file,
)
from learning_adventures.infrastructure.storage.safe_zip import (
    UnsafeArchiveError,
    extract_zip_safely,
    open_archive,
    resolve_inside,
)

__all__ = [
    "BLOB_EXTENSIONS",
    "BlobStorageClient",
    "BlobStorageError",
    "PathTraversalError",
    "StoredFile",
    "UnsafeArchiveError",
    "extract_zip_safely",
    "open_archive",
    "resolve_inside",
    "resolve_public_path",
    "route_file_upload",
    "should_use_blob_storage",
    "write_public_file",
]
