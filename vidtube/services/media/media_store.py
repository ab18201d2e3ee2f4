"""
VidTube Media Store — avatar and cover-image uploads to MinIO / S3.

The MinIO client is blocking, so uploads run in the default thread pool;
the calling request is suspended until the object is stored.
"""
from __future__ import annotations

import asyncio
import io
import logging
import os
import uuid
from dataclasses import dataclass
from functools import partial
from typing import Optional

from minio import Minio
from minio.error import S3Error
from urllib3.exceptions import HTTPError

from vidtube.core.config import get_settings
from vidtube.core.errors import ServerError

logger = logging.getLogger(__name__)
settings = get_settings()


class MediaUploadError(ServerError):
    default_message = "Failed to upload file"


@dataclass(frozen=True)
class IncomingFile:
    """A file received in a multipart request, already read into memory."""

    filename: str
    content_type: Optional[str]
    data: bytes


class MediaStore:
    """Stores uploaded images and hands back their public URLs."""

    def __init__(self):
        self._client: Optional[Minio] = None

    @property
    def client(self) -> Minio:
        if self._client is None:
            self._client = Minio(
                settings.minio_endpoint,
                access_key=settings.minio_access_key,
                secret_key=settings.minio_secret_key,
                secure=settings.minio_secure,
            )
        return self._client

    def public_url(self, object_name: str) -> str:
        return f"{settings.media_public_url.rstrip('/')}/{settings.minio_bucket}/{object_name}"

    async def ensure_bucket(self) -> None:
        loop = asyncio.get_running_loop()
        exists = await loop.run_in_executor(None, self.client.bucket_exists, settings.minio_bucket)
        if not exists:
            await loop.run_in_executor(None, self.client.make_bucket, settings.minio_bucket)
            logger.info(f"Created media bucket {settings.minio_bucket}")

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        folder: str = "uploads",
    ) -> str:
        """Store ``data`` and return its URL; raises ``MediaUploadError``."""
        if not data:
            raise MediaUploadError(f"Refusing to upload empty file {filename!r}")
        if len(data) > settings.max_upload_bytes:
            raise MediaUploadError(f"File {filename!r} exceeds {settings.max_upload_bytes} bytes")

        ext = os.path.splitext(filename or "")[1].lower()
        object_name = f"{folder}/{uuid.uuid4().hex}{ext}"
        put = partial(
            self.client.put_object,
            settings.minio_bucket,
            object_name,
            io.BytesIO(data),
            length=len(data),
            content_type=content_type or "application/octet-stream",
        )
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, put)
        except (S3Error, HTTPError, OSError) as exc:
            logger.error(f"Upload of {filename!r} to {object_name} failed: {exc}")
            raise MediaUploadError(f"Failed to upload {filename!r}: {exc}") from exc

        url = self.public_url(object_name)
        logger.info(f"Uploaded {filename!r} -> {url}")
        return url

    async def delete(self, url: str) -> None:
        """Best-effort removal of an object previously returned by ``upload``."""
        prefix = self.public_url("")
        if not url.startswith(prefix):
            return
        object_name = url[len(prefix):]
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.client.remove_object, settings.minio_bucket, object_name)
        except (S3Error, HTTPError, OSError) as exc:
            logger.warning(f"Could not remove orphaned object {object_name}: {exc}")


media_store = MediaStore()


def get_media_store() -> MediaStore:
    return media_store
