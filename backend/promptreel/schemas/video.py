"""Pydantic v2 schemas for video generation responses."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class GenerationResult(BaseModel):
    """Descriptor of a generated and stored video.

    Serialized with the camelCase wire names; the clip length goes out as
    ``seconds``.
    """

    video_id: str = Field(alias="videoId", min_length=1)
    status: Literal["completed"] = "completed"
    created_at: int = Field(alias="createdAt")
    download_url: str = Field(alias="downloadUrl", min_length=1)
    model: str
    size: str
    duration_seconds: str = Field(alias="seconds")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ErrorResponse(BaseModel):
    detail: str
