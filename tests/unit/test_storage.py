# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for safe zip extraction and upload routing."""

import io
import zipfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr

from learning_adventures.infrastructure.storage import (
    BlobStorageClient,
    BlobStorageError,
    PathTraversalError,
    UnsafeArchiveError,
    extract_zip_safely,
    open_archive,
    resolve_inside,
    route_file_upload,
    should_use_blob_storage,
    write_public_file,
)


def build_zip(entries: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def storage_settings(tmp_path: Path) -> MagicMock:
    """Storage settings rooted in a temporary public directory."""
    settings = MagicMock()
    settings.public_dir = str(tmp_path / "public")
    settings.local_max_size = 1024
    settings.blob_api_url = "https://blob.example.com"
    settings.blob_token = SecretStr("blob-token")
    return settings


class TestResolveInside:
    """Tests for resolve_inside."""

    def test_inside(self, tmp_path: Path) -> None:
        assert resolve_inside(tmp_path, "games/a.html") == (tmp_path / "games/a.html").resolve()

    @pytest.mark.parametrize("relative", ["../escape.txt", "games/../../escape.txt", "/etc/passwd"])
    def test_outside(self, tmp_path: Path, relative: str) -> None:
        assert resolve_inside(tmp_path / "base", relative) is None


class TestExtractZipSafely:
    """Tests for extract_zip_safely."""

    def test_extracts_nested_files(self, tmp_path: Path) -> None:
        data = build_zip({"metadata.json": b"{}", "assets/img/logo.png": b"png"})

        with open_archive(data) as archive:
            written = extract_zip_safely(archive, tmp_path / "out")

        assert len(written) == 2
        assert (tmp_path / "out/assets/img/logo.png").read_bytes() == b"png"

    def test_rejects_traversal(self, tmp_path: Path) -> None:
        """Test that a zip slip entry aborts before anything escapes."""
        data = build_zip({"../evil.txt": b"owned"})

        with open_archive(data) as archive, pytest.raises(UnsafeArchiveError) as exc_info:
            extract_zip_safely(archive, tmp_path / "out")

        assert exc_info.value.entry_name == "../evil.txt"
        assert not (tmp_path / "evil.txt").exists()

    def test_rejects_directory_traversal(self, tmp_path: Path) -> None:
        data = build_zip({"../outside/": b""})

        with open_archive(data) as archive, pytest.raises(UnsafeArchiveError):
            extract_zip_safely(archive, tmp_path / "out")

        assert not (tmp_path / "outside").exists()

    def test_bad_archive(self) -> None:
        with pytest.raises(zipfile.BadZipFile):
            open_archive(b"not a zip")


class TestUploadRouting:
    """Tests for should_use_blob_storage and route_file_upload."""

    @pytest.mark.parametrize(
        ("filename", "size", "expected"),
        [
            ("page.html", 100, False),
            ("page.html", 1025, True),
            ("intro.MP4", 10, True),
            ("clip.webm", 10, True),
            ("notes.txt", 1024, False),
        ],
    )
    def test_should_use_blob(self, storage_settings, filename: str, size: int, expected: bool) -> None:
        assert should_use_blob_storage(filename, size, storage_settings) is expected

    @pytest.mark.asyncio
    async def test_small_file_stored_locally(self, storage_settings) -> None:
        stored = await route_file_upload("game.html", b"<html></html>", "games/game.html", storage_settings)

        assert stored.storage_type == "LOCAL"
        assert stored.url == "/games/game.html"
        assert (Path(storage_settings.public_dir) / "games/game.html").read_bytes() == b"<html></html>"

    @pytest.mark.asyncio
    async def test_video_goes_to_blob(self, storage_settings) -> None:
        blob_client = MagicMock()
        blob_client.upload = AsyncMock(return_value="https://cdn.example.com/videos/intro.mp4")

        stored = await route_file_upload(
            "intro.mp4", b"video", "videos/intro.mp4", storage_settings, blob_client
        )

        assert stored.storage_type == "BLOB"
        assert stored.url == "https://cdn.example.com/videos/intro.mp4"
        blob_client.upload.assert_awaited_once_with("videos/intro.mp4", b"video")
        assert not (Path(storage_settings.public_dir) / "videos/intro.mp4").exists()

    @pytest.mark.asyncio
    async def test_traversal_rejected(self, storage_settings) -> None:
        with pytest.raises(PathTraversalError):
            await route_file_upload("x.html", b"x", "../../etc/x.html", storage_settings)

    def test_write_public_file(self, storage_settings) -> None:
        path = write_public_file("staging/games/a.html", b"a", storage_settings)

        assert path.read_bytes() == b"a"


class TestBlobStorageClient:
    """Tests for BlobStorageClient."""

    @pytest.mark.asyncio
    async def test_requires_token(self) -> None:
        client = BlobStorageClient("https://blob.example.com/", None)

        assert client.is_configured is False
        with pytest.raises(BlobStorageError, match="not configured"):
            await client.upload("a.mp4", b"x")

    def test_headers(self) -> None:
        client = BlobStorageClient("https://blob.example.com/", "tok")

        assert client.api_url == "https://blob.example.com"
        assert client._get_headers()["Authorization"] == "Bearer tok"
