"""OpenAI Sora video generation provider.

Uses the /videos REST endpoints directly:
  POST /videos               → {id, status, model, size, seconds, created_at}
  GET  /videos/{id}          → {status, progress, error?}
  GET  /videos/{id}/content  → MP4 bytes (authenticated)

A completed job has exactly one result: its content endpoint.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from promptreel.config import Settings
from promptreel.errors import SubmissionError, TransientPollError
from promptreel.services.models import InputImage, JobStatus, SubmittedJob
from promptreel.services.providers.base import VideoProvider

logger = logging.getLogger(__name__)

_PENDING_STATUSES = ("queued", "in_progress")


class SoraVideoProvider(VideoProvider):
    """Sora client. The reference image is sent as a file, not as a URL."""

    name = "sora"
    source = "openai-sora"
    key_prefix = ""

    def __init__(
        self,
        *,
        api_key: str,
        http_client: httpx.AsyncClient,
        base_url: str = "https://api.openai.com/v1",
        model: str = "sora-2",
        seconds: str = "4",
        poll_timeout: float = 300,
        poll_interval: float = 5,
    ) -> None:
        if not api_key:
            raise ValueError("OpenAI API key is required")
        super().__init__(
            http_client=http_client,
            poll_timeout=poll_timeout,
            poll_interval=poll_interval,
        )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.seconds = seconds

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> SoraVideoProvider:
        return cls(
            api_key=settings.OPENAI_API_KEY,
            http_client=http_client,
            base_url=settings.OPENAI_BASE_URL,
            model=settings.SORA_MODEL,
            seconds=settings.SORA_SECONDS,
            poll_timeout=settings.SORA_POLL_TIMEOUT,
            poll_interval=settings.SORA_POLL_INTERVAL,
        )

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _download_headers(self) -> dict[str, str]:
        return self._auth_headers()

    def content_url(self, job_id: str) -> str:
        return f"{self.base_url}/videos/{job_id}/content"

    async def submit(
        self,
        prompt: str,
        *,
        image_urls: Sequence[str] = (),
        image: InputImage | None = None,
    ) -> SubmittedJob:
        # Sent as multipart form fields; (None, value) marks a plain field.
        form: dict[str, Any] = {
            "model": (None, self.model),
            "seconds": (None, self.seconds),
            "prompt": (None, prompt),
        }
        if image is not None:
            form["input_reference"] = (image.filename, image.content, image.content_type)
            logger.info("Attaching reference image: %s", image.filename)

        try:
            resp = await self.http_client.post(
                f"{self.base_url}/videos", files=form, headers=self._auth_headers()
            )
        except httpx.HTTPError as e:
            raise SubmissionError(f"OpenAI video request failed: {e}") from e

        if resp.is_error:
            raise SubmissionError(
                f"OpenAI video API error: HTTP {resp.status_code} {_error_message(resp)}"
            )

        try:
            video = resp.json()
        except ValueError as e:
            raise SubmissionError("OpenAI video API returned a non-JSON body") from e

        video_id = video.get("id") if isinstance(video, dict) else None
        if not video_id:
            raise SubmissionError(f"OpenAI video creation returned no id: {video}")

        logger.info("Video created with ID: %s, status: %s", video_id, video.get("status"))
        created_at = video.get("created_at")
        return SubmittedJob(
            job_id=video_id,
            model=str(video.get("model") or self.model),
            size=str(video.get("size") or "unknown"),
            duration_seconds=str(video.get("seconds") or self.seconds),
            created_at=int(created_at) if isinstance(created_at, (int, float)) else None,
        )

    async def fetch_status(self, job_id: str) -> JobStatus:
        try:
            resp = await self.http_client.get(
                f"{self.base_url}/videos/{job_id}", headers=self._auth_headers()
            )
            resp.raise_for_status()
            video = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransientPollError(f"OpenAI video status check failed: {e}") from e

        if not isinstance(video, dict):
            raise TransientPollError(f"OpenAI video status body is not an object: {video!r}")

        status = str(video.get("status", "")).lower()
        logger.info("Video %s status: %s, progress: %s%%", job_id, status, video.get("progress"))

        if status == "completed":
            return JobStatus.completed([self.content_url(job_id)])
        if status == "failed":
            error = video.get("error") or {}
            reason = error.get("message") if isinstance(error, dict) else str(error)
            return JobStatus.failed(reason)
        if status in _PENDING_STATUSES:
            return JobStatus.pending()
        return JobStatus.unknown(status or None)


def _error_message(resp: httpx.Response) -> str:
    """Best-effort extraction of the API error message."""
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message") or resp.reason_phrase)
    return resp.reason_phrase
