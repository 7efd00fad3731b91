"""Storage API Client for File Operations

Handles:
- Multipart uploads from bytes, local paths or file objects
- File metadata, downloads and deletion
- Signed and public URLs
- Listing by prefix
"""

import json
import logging
import mimetypes
import os
from pathlib import Path
from typing import Any, BinaryIO
from urllib.parse import quote

from ..config import DefaultConfig
from ..enums import HTTPMethod
from ..exceptions import ValidationError
from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_SIGNED_URL_EXPIRY = 3600


class StorageClient(BaseAPIClient):
    """Client for the storage API.

    All paths are object keys inside the tenant's bucket; the backend scopes
    them by the organization/project context headers.
    """

    ENDPOINT = "/storage"

    async def upload(
        self,
        content: bytes | str | os.PathLike | BinaryIO,
        file_path: str,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
        timeout: int = DefaultConfig.LONG_RUNNING_TIMEOUT,
    ) -> dict[str, Any]:
        """Upload a file as ``multipart/form-data``.

        Args:
            content: Raw bytes, a local file path or a binary file object
            file_path: Destination key in storage
            content_type: MIME type, guessed from the file name when omitted
            metadata: Arbitrary metadata stored with the object
            timeout: Per-call timeout in milliseconds

        Returns:
            Uploaded object descriptor (``path``, ``url``, ``size``...)
        """
        self._require(file_path, "file_path")
        self._require(content, "content")

        filename = os.path.basename(file_path) or "upload"
        if isinstance(content, (str, os.PathLike)):
            source = Path(content)
            if not source.is_file():
                raise ValidationError(f"File not found: {content}", field="content")
            data = source.read_bytes()
        elif isinstance(content, (bytes, bytearray)):
            data = bytes(content)
        else:
            data = content.read()

        mime_type = (
            content_type or mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE
        )
        form_data = {"path": file_path}
        if metadata:
            form_data["metadata"] = json.dumps(metadata)

        logger.debug(f"Uploading {len(data)} bytes to {file_path}")
        return await self._request(
            HTTPMethod.POST,
            self._build_url("upload"),
            files={"file": (filename, data, mime_type)},
            form_data=form_data,
            timeout=timeout,
        )

    async def get_file(self, file_path: str) -> dict[str, Any]:
        """Get object metadata and access information."""
        self._require(file_path, "file_path")
        return await self._get(self._build_url("file"), {"path": file_path})

    async def download(
        self, file_path: str, timeout: int = DefaultConfig.LONG_RUNNING_TIMEOUT
    ) -> bytes:
        """Download object content as bytes."""
        self._require(file_path, "file_path")
        return await self._get(
            self._build_url("download"),
            {"path": file_path},
            raw_response=True,
            unwrap=False,
            timeout=timeout,
        )

    async def delete(self, file_path: str) -> bool:
        self._require(file_path, "file_path")
        await self._delete(self._build_url("file"), params={"path": file_path})
        logger.debug(f"Deleted {file_path}")
        return True

    def get_public_url(self, file_path: str) -> str:
        """Public URL of an object served through the API. No request is made."""
        self._require(file_path, "file_path")
        base_url = self._transport.config.api_url.rstrip("/")
        return f"{base_url}{self._build_url('public')}/{quote(file_path, safe='')}"

    async def create_signed_url(
        self, file_path: str, expires_in: int = DEFAULT_SIGNED_URL_EXPIRY
    ) -> dict[str, Any]:
        """Create a temporary signed URL.

        Args:
            file_path: Object key
            expires_in: Lifetime in seconds

        Returns:
            ``{"signedUrl": ..., "expiresAt": ...}``
        """
        self._require(file_path, "file_path")
        return await self._post(
            self._build_url("signed-url"),
            {"path": file_path, "expiresIn": expires_in},
            idempotent=True,
        )

    # Defined last: the name shadows the builtin inside the class body
    async def list(self, prefix: str | None = None) -> Any:
        return await self._get(self._build_url("list"), {"prefix": prefix})
