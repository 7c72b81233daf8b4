"""Video generation API — one endpoint per provider, same request shape.

Request: multipart form with ``prompt`` (required) and optional file ``image``.
Failures are collapsed to two outward outcomes: 408 for a poll timeout and
500 for everything else. The detailed cause is only logged.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from promptreel.api.deps import get_video_service
from promptreel.errors import GenerationTimeoutError, VideoGenerationError
from promptreel.schemas.video import ErrorResponse, GenerationResult
from promptreel.services.models import InputImage
from promptreel.services.video_gen import VideoGenerationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/video", tags=["Video Generation"])

MAX_IMAGE_BYTES = 30 * 1024 * 1024

_ERROR_RESPONSES = {
    408: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


async def _read_image(image: UploadFile | None) -> InputImage | None:
    if image is None or not image.filename:
        return None

    content = await image.read(MAX_IMAGE_BYTES + 1)
    if len(content) > MAX_IMAGE_BYTES:
        raise HTTPException(status_code=413, detail="Image is too large. Maximum size is 30MB.")

    return InputImage(
        filename=image.filename,
        content=content,
        content_type=image.content_type or "application/octet-stream",
    )


def _validated_prompt(prompt: str) -> str:
    prompt = prompt.strip()
    if not prompt:
        raise HTTPException(status_code=422, detail="prompt must not be empty")
    return prompt


async def _run(
    service: VideoGenerationService,
    provider: str,
    prompt: str,
    image: UploadFile | None,
) -> GenerationResult:
    prompt = _validated_prompt(prompt)
    input_image = await _read_image(image)
    logger.info("Received %s video generation request with prompt: %r", provider, prompt)

    try:
        result = await service.generate(provider, prompt, input_image)
    except GenerationTimeoutError:
        raise HTTPException(status_code=408, detail="Video generation timeout - please try again")
    except VideoGenerationError as e:
        logger.error("%s video generation failed (%s): %s", provider, type(e).__name__, e)
        raise HTTPException(status_code=500, detail="Video generation failed")

    logger.info("Video generation completed successfully: %s", result.video_id)
    return result


@router.post("/generate", response_model=GenerationResult, responses=_ERROR_RESPONSES)
async def generate_video(
    prompt: str = Form(...),
    image: UploadFile | None = File(None),
    service: VideoGenerationService = Depends(get_video_service),
):
    """Generate a video with OpenAI Sora."""
    return await _run(service, "sora", prompt, image)


@router.post("/generate/kie", response_model=GenerationResult, responses=_ERROR_RESPONSES)
async def generate_video_with_kie(
    prompt: str = Form(...),
    image: UploadFile | None = File(None),
    service: VideoGenerationService = Depends(get_video_service),
):
    """Generate a video with Veo 3 through Kie."""
    return await _run(service, "kie", prompt, image)
