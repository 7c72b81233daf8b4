"""Kie video generation provider (Veo 3 through the Kie.ai task API).

Wire contract:
  submit → {code, msg, data: {taskId}}
  status → {code, msg, data: {successFlag, response?: {resultUrls: [...]}}}

successFlag: 0 generating, 1 success, 2/3 failed.
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

_API_OK = 200


class KieVideoProvider(VideoProvider):
    """Kie Veo 3 client. A completed task may carry several result URLs."""

    name = "kie"
    source = "kie-veo3"
    key_prefix = "kie-"

    def __init__(
        self,
        *,
        api_key: str,
        create_url: str,
        status_url: str,
        http_client: httpx.AsyncClient,
        model: str = "veo3_fast",
        aspect_ratio: str = "9:16",
        poll_timeout: float = 600,
        poll_interval: float = 10,
    ) -> None:
        if not api_key:
            raise ValueError("Kie API key is required")
        super().__init__(
            http_client=http_client,
            poll_timeout=poll_timeout,
            poll_interval=poll_interval,
        )
        self.api_key = api_key
        self.create_url = create_url
        self.status_url = status_url
        self.model = model
        self.aspect_ratio = aspect_ratio

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> KieVideoProvider:
        return cls(
            api_key=settings.KIE_API_KEY,
            create_url=settings.KIE_VEO_URL,
            status_url=settings.KIE_STATUS_URL,
            http_client=http_client,
            model=settings.KIE_MODEL,
            aspect_ratio=settings.KIE_ASPECT_RATIO,
            poll_timeout=settings.KIE_POLL_TIMEOUT,
            poll_interval=settings.KIE_POLL_INTERVAL,
        )

    async def submit(
        self,
        prompt: str,
        *,
        image_urls: Sequence[str] = (),
        image: InputImage | None = None,
    ) -> SubmittedJob:
        body: dict[str, Any] = {
            "prompt": prompt,
            "imageUrls": list(image_urls) if image_urls else None,
            "model": self.model,
            "aspect_ratio": self.aspect_ratio,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = await self.http_client.post(self.create_url, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise SubmissionError(f"Kie API request failed: {e}") from e

        if resp.is_error:
            raise SubmissionError(f"Kie API error: HTTP {resp.status_code} {resp.reason_phrase}")

        try:
            result = resp.json()
        except ValueError as e:
            raise SubmissionError("Kie API returned a non-JSON body") from e

        if not isinstance(result, dict) or result.get("code") != _API_OK:
            msg = result.get("msg") if isinstance(result, dict) else result
            raise SubmissionError(f"Kie API error: {msg}")

        data = result.get("data")
        task_id = data.get("taskId") if isinstance(data, dict) else None
        if not task_id:
            raise SubmissionError(f"Kie task creation failed: no taskId in {result}")

        logger.info("Kie task created: %s (model=%s)", task_id, self.model)
        return SubmittedJob(job_id=str(task_id), model=self.model)

    async def fetch_status(self, job_id: str) -> JobStatus:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            resp = await self.http_client.get(
                self.status_url, params={"taskId": job_id}, headers=headers
            )
            result = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransientPollError(f"Kie status check failed: {e}") from e

        if resp.is_error or not isinstance(result, dict) or result.get("code") != _API_OK:
            msg = result.get("msg") if isinstance(result, dict) else None
            raise TransientPollError(f"Kie status check failed: {msg or 'Unknown error'}")

        data = result.get("data")
        if not isinstance(data, dict):
            raise TransientPollError(f"Kie status check returned malformed data: {data!r}")
        flag = data.get("successFlag")

        if flag == 0:
            logger.info("Kie video %s generating...", job_id)
            return JobStatus.pending()
        if flag == 1:
            response = data.get("response") or {}
            if not isinstance(response, dict):
                raise TransientPollError(
                    f"Kie status check returned malformed response: {response!r}"
                )
            urls = response.get("resultUrls")
            urls = [u for u in urls if isinstance(u, str)] if isinstance(urls, list) else []
            logger.info("Kie video %s generation successful, URLs: %s", job_id, urls)
            return JobStatus.completed(urls)
        if flag in (2, 3):
            return JobStatus.failed(result.get("msg"))
        return JobStatus.unknown(flag)
