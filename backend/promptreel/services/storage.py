"""Artifact store — durable object storage for reference images and generated videos.

Object key scheme:
  images/<epoch-ms>-<original filename>   reference images
  videos/<prefix><job id>.mp4             generated videos

Public URLs are derived from bucket name + key.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Callable

from google.cloud import storage
from google.oauth2 import service_account

from promptreel.config import Settings
from promptreel.errors import ConfigurationError, PayloadTooLargeError, StorageError
from promptreel.services.models import InputImage

logger = logging.getLogger(__name__)

MAX_VIDEO_BYTES = 100 * 1024 * 1024
PUBLIC_URL_BASE = "https://storage.googleapis.com"


class ArtifactStore(ABC):
    """Durable ``put(bytes, key, metadata) -> URL`` plus the two upload flavours."""

    max_video_bytes: int = MAX_VIDEO_BYTES

    def __init__(self, *, time_ms: Callable[[], int] | None = None):
        self._time_ms = time_ms or (lambda: int(time.time() * 1000))

    @abstractmethod
    async def put(
        self,
        data: bytes,
        key: str,
        *,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """Store ``data`` under ``key`` and return its public URL."""
        ...

    async def upload_image(self, image: InputImage) -> str:
        """Upload a reference image under ``images/<timestamp>-<filename>``."""
        filename = PurePosixPath(image.filename.replace("\\", "/")).name or "image"
        key = f"images/{self._time_ms()}-{filename}"
        url = await self.put(image.content, key, content_type=image.content_type)
        logger.info("Image uploaded to bucket: %s", url)
        return url

    async def save_video(
        self,
        data: bytes,
        key: str,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """Store a generated video. Oversized payloads never reach storage."""
        if len(data) > self.max_video_bytes:
            raise PayloadTooLargeError(len(data), self.max_video_bytes)

        url = await self.put(data, key, content_type="video/mp4", metadata=metadata)
        logger.info("Video saved to bucket: %s", url)
        return url


class GcsArtifactStore(ArtifactStore):
    """Google Cloud Storage implementation.

    The storage SDK is blocking, so uploads run in a worker thread.
    """

    def __init__(self, bucket_name: str, client: storage.Client, **kwargs):
        super().__init__(**kwargs)
        self.bucket_name = bucket_name
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> GcsArtifactStore:
        """Build the store from settings, loading the service-account file."""
        try:
            credentials = service_account.Credentials.from_service_account_file(
                settings.GCP_CREDENTIALS
            )
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to load GCP credentials from {settings.GCP_CREDENTIALS}: {e}"
            ) from e

        client = storage.Client(project=settings.GCP_PROJECT_ID, credentials=credentials)
        return cls(settings.GCP_STORAGE_BUCKET_NAME, client)

    def public_url(self, key: str) -> str:
        return f"{PUBLIC_URL_BASE}/{self.bucket_name}/{key}"

    async def put(
        self,
        data: bytes,
        key: str,
        *,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> str:
        blob_metadata = {
            "uploadedAt": datetime.now(timezone.utc).isoformat(),
            **(metadata or {}),
        }

        def _sync_upload() -> None:
            blob = self.client.bucket(self.bucket_name).blob(key)
            blob.metadata = blob_metadata
            blob.upload_from_string(data, content_type=content_type)

        try:
            await asyncio.to_thread(_sync_upload)
        except Exception as e:
            logger.error("Error saving %s to bucket %s: %s", key, self.bucket_name, e)
            raise StorageError(f"Failed to upload {key} to storage") from e

        return self.public_url(key)
