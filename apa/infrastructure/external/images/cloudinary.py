"""Cloudinary image upload (unsigned preset, REST via httpx)."""

from __future__ import annotations

import logging

import httpx

from apa.domain.exceptions import TransientIOException
from apa.infrastructure.exceptions import ImageUploadError

logger = logging.getLogger(__name__)

_API_BASE = "https://api.cloudinary.com/v1_1"


class CloudinaryImageUploader:
    """IImageUploader posting multipart uploads to an unsigned preset.

    Returns the durable secure_url; deletion is not supported (unsigned
    presets cannot destroy assets).
    """

    def __init__(self, http_client: httpx.AsyncClient, cloud_name: str, upload_preset: str) -> None:
        self._http = http_client
        self._url = f"{_API_BASE}/{cloud_name}/image/upload"
        self._upload_preset = upload_preset

    async def upload(self, filename: str, content: bytes, content_type: str) -> str:
        try:
            resp = await self._http.post(
                self._url,
                data={"upload_preset": self._upload_preset},
                files={"file": (filename, content, content_type)},
            )
        except httpx.TransportError as e:
            logger.warning("Cloudinary upload transport error: %s", e)
            raise TransientIOException(operation="image_upload") from e
        if resp.status_code >= 500:
            raise TransientIOException(operation="image_upload")
        if resp.status_code != 200:
            try:
                reason = resp.json().get("error", {}).get("message", resp.text)
            except ValueError:
                reason = resp.text
            logger.error("Cloudinary rejected %s: %s", filename, reason)
            raise ImageUploadError(filename, reason)
        secure_url = resp.json().get("secure_url")
        if not secure_url:
            raise ImageUploadError(filename, "response without secure_url")
        return secure_url
