"""FastAPI dependencies backed by the objects built in the app lifespan."""

from __future__ import annotations

from fastapi import Request

from promptreel.services.video_gen import VideoGenerationService


def get_video_service(request: Request) -> VideoGenerationService:
    return request.app.state.video_service
