"""Video generation service — orchestrates one generation end to end.

Flow per call:
1. Upload the optional reference image to the artifact store
2. Submit the job to the selected provider
3. Poll until a terminal status (provider-specific deadline/interval)
4. Download the canonical result and store it under a provider-tagged key
5. Shape the uniform GenerationResult

Every call creates a new remote job; retries by the caller duplicate work.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Mapping

from promptreel.errors import GenerationFailedError, VideoGenerationError
from promptreel.schemas.video import GenerationResult
from promptreel.services.models import GenerationJob, InputImage, JobState
from promptreel.services.poller import poll_until_terminal
from promptreel.services.providers.base import VideoProvider
from promptreel.services.storage import ArtifactStore

logger = logging.getLogger(__name__)


class VideoGenerationService:
    """Coordinates image upload, job submission, polling and artifact storage.

    Holds only read-only collaborators, so one instance serves concurrent
    requests.
    """

    service_name = "video_gen"

    def __init__(
        self,
        providers: Mapping[str, VideoProvider],
        store: ArtifactStore,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        now: Callable[[], float] = time.time,
    ) -> None:
        self.providers = dict(providers)
        self.store = store
        self._clock = clock
        self._sleep = sleep
        self._now = now

    def get_provider(self, name: str) -> VideoProvider:
        try:
            return self.providers[name]
        except KeyError:
            raise ValueError(f"Unknown video provider: {name}") from None

    async def generate_with_sora(
        self, prompt: str, image: InputImage | None = None
    ) -> GenerationResult:
        return await self.generate("sora", prompt, image)

    async def generate_with_kie(
        self, prompt: str, image: InputImage | None = None
    ) -> GenerationResult:
        return await self.generate("kie", prompt, image)

    async def generate(
        self,
        provider_name: str,
        prompt: str,
        image: InputImage | None = None,
    ) -> GenerationResult:
        """Run the full workflow against one provider.

        Raises a VideoGenerationError subclass on any failure; never returns a
        partially filled result.
        """
        provider = self.get_provider(provider_name)
        logger.info(
            "Starting %s video generation for prompt: %r and image: %s",
            provider.name, prompt, image.filename if image else "none",
        )
        start = self._clock()

        try:
            job = await self._submit(provider, prompt, image)

            status = await poll_until_terminal(
                job.job_id,
                provider.fetch_status,
                max_wait=provider.poll_timeout,
                poll_interval=provider.poll_interval,
                clock=self._clock,
                sleep=self._sleep,
                label=provider.name,
            )

            if status.state == JobState.FAILED:
                raise GenerationFailedError(job.job_id, status.reason or "Unknown error")

            video_url = provider.select_result(job.job_id, status)
            data = await provider.download(video_url, max_bytes=self.store.max_video_bytes)
            download_url = await self.store.save_video(
                data,
                provider.artifact_key(job.job_id),
                {"videoId": job.job_id, "source": provider.source},
            )
        except VideoGenerationError as e:
            logger.error("Error in %s video generation: %s", provider.name, e)
            raise

        latency_ms = int((self._clock() - start) * 1000)
        logger.info(
            "%s video %s completed and saved to: %s (%dms)",
            provider.name, job.job_id, download_url, latency_ms,
        )

        return GenerationResult(
            video_id=job.job_id,
            created_at=job.created_at,
            download_url=download_url,
            model=job.model,
            size=job.size,
            duration_seconds=job.duration_seconds,
        )

    async def _submit(
        self,
        provider: VideoProvider,
        prompt: str,
        image: InputImage | None,
    ) -> GenerationJob:
        # The image goes to storage first so no remote job references a missing file.
        image_url = await self.store.upload_image(image) if image is not None else None

        submitted = await provider.submit(
            prompt,
            image_urls=[image_url] if image_url else [],
            image=image,
        )
        logger.info("%s video job created with ID: %s", provider.name, submitted.job_id)

        return GenerationJob(
            provider=provider.name,
            job_id=submitted.job_id,
            prompt=prompt,
            model=submitted.model,
            size=submitted.size,
            duration_seconds=submitted.duration_seconds,
            created_at=submitted.created_at or int(self._now()),
            input_image_url=image_url,
        )
