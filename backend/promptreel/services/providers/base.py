"""Provider client contract shared by the video generation providers.

Each provider implements the async task pattern:
  submit job → report classified status → expose result URL(s) for download

Concrete providers differ only in wire shape, status vocabulary and how many
result URLs a completed job can carry.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Sequence

import httpx

from promptreel.errors import GenerationFailedError, PayloadTooLargeError, StorageError
from promptreel.services.models import InputImage, JobStatus, SubmittedJob

logger = logging.getLogger(__name__)


class VideoProvider(ABC):
    """Stateless client for one external video generation API."""

    name: str = "unknown"
    source: str = "unknown"
    key_prefix: str = ""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        poll_timeout: float,
        poll_interval: float,
    ) -> None:
        self.http_client = http_client
        self.poll_timeout = poll_timeout
        self.poll_interval = poll_interval

    @abstractmethod
    async def submit(
        self,
        prompt: str,
        *,
        image_urls: Sequence[str] = (),
        image: InputImage | None = None,
    ) -> SubmittedJob:
        """Create a remote job. Raises SubmissionError when it is not accepted."""
        ...

    @abstractmethod
    async def fetch_status(self, job_id: str) -> JobStatus:
        """Classify the job's current status.

        Raises TransientPollError on transport or parse failure only.
        """
        ...

    def select_result(self, job_id: str, status: JobStatus) -> str:
        """Pick the canonical result URL: the first non-empty one."""
        for url in status.result_urls:
            if url:
                return url
        raise GenerationFailedError(job_id, "provider reported completion without a video URL")

    def artifact_key(self, job_id: str) -> str:
        return f"videos/{self.key_prefix}{job_id}.mp4"

    def _download_headers(self) -> dict[str, str]:
        return {}

    async def download(self, url: str, *, max_bytes: int) -> bytes:
        """Stream the artifact into memory, refusing anything over ``max_bytes``."""
        buf = bytearray()
        try:
            async with self.http_client.stream(
                "GET", url, headers=self._download_headers(), follow_redirects=True
            ) as response:
                if response.is_error:
                    raise StorageError(
                        f"Failed to download video: HTTP {response.status_code}"
                    )

                length = response.headers.get("content-length", "")
                if length.isdigit() and int(length) > max_bytes:
                    raise PayloadTooLargeError(int(length), max_bytes)

                async for chunk in response.aiter_bytes():
                    buf.extend(chunk)
                    if len(buf) > max_bytes:
                        raise PayloadTooLargeError(len(buf), max_bytes)
        except httpx.HTTPError as e:
            logger.error("%s download failed for %s: %s", self.name, url, e)
            raise StorageError(f"Failed to download video: {e}") from e

        logger.info("%s downloaded %d bytes", self.name, len(buf))
        return bytes(buf)
