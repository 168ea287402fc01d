# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Async client for the cloud blob store used for large and video uploads.

Example:
    client = BlobStorageClient(api_url="https://blob.example.com", token="...")
    url = await client.upload("videos/intro.mp4", data)
"""

import logging

import aiohttp

logger = logging.getLogger(__name__)


class BlobStorageError(Exception):
    """Blob upload failed or the store is not configured."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class BlobStorageClient:
    """Uploads public objects with a PUT and returns their URL.

    Attributes:
        api_url: Base URL of the blob API.
        token: Read/write bearer token.
        timeout: Request timeout.
    """

    def __init__(self, api_url: str, token: str | None, timeout: int = 60):
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "x-content-type": "application/octet-stream",
            "x-add-random-suffix": "0",
        }

    async def upload(self, path: str, data: bytes) -> str:
        """Upload ``data`` under ``path``.

        Returns:
            Public URL of the stored object.

        Raises:
            BlobStorageError: Not configured, connection failure or error reply.
        """
        if not self.is_configured:
            raise BlobStorageError("Blob storage token not configured")

        url = f"{self.api_url}/{path.lstrip('/')}"
        logger.debug("Uploading %d bytes to blob storage: %s", len(data), path)

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.put(url, data=data, headers=self._get_headers()) as response:
                    if response.status not in (200, 201):
                        body = await response.text()
                        raise BlobStorageError(
                            f"Blob upload failed: {body[:200]}", status_code=response.status
                        )
                    payload = await response.json()
        except aiohttp.ClientError as e:
            logger.error("Blob storage connection error: %s", str(e))
            raise BlobStorageError(f"Failed to connect to blob storage: {str(e)}") from e

        blob_url = payload.get("url")
        if not blob_url:
            raise BlobStorageError("Blob storage response did not include a URL")

        logger.info("Uploaded blob: %s", blob_url)
        return blob_url
