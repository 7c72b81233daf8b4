"""Domain models shared by the providers, the poller and the orchestrator."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime


class JobState(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class JobStatus:
    """One classified status observation for a remote job.

    ``result_urls`` is only meaningful for COMPLETED, ``reason`` for FAILED and
    ``raw`` carries the unrecognized provider code for UNKNOWN.
    """

    state: JobState
    result_urls: tuple[str, ...] = ()
    reason: str | None = None
    raw: object = None

    @classmethod
    def pending(cls) -> JobStatus:
        return cls(JobState.PENDING)

    @classmethod
    def completed(cls, result_urls) -> JobStatus:
        return cls(JobState.COMPLETED, result_urls=tuple(result_urls or ()))

    @classmethod
    def failed(cls, reason: str | None) -> JobStatus:
        return cls(JobState.FAILED, reason=reason or "Unknown error")

    @classmethod
    def unknown(cls, raw: object) -> JobStatus:
        return cls(JobState.UNKNOWN, raw=raw)

    @property
    def is_terminal(self) -> bool:
        return self.state in (JobState.COMPLETED, JobState.FAILED)


@dataclass(frozen=True)
class InputImage:
    """Reference image as received from the client."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class SubmittedJob:
    """What a provider reports back when a job is accepted."""

    job_id: str
    model: str
    size: str = "unknown"
    duration_seconds: str = "unknown"
    created_at: int | None = None  # unix seconds, when the provider reports it


@dataclass(frozen=True)
class GenerationJob:
    """A successfully submitted remote job. Lives for one request."""

    provider: str
    job_id: str
    prompt: str
    model: str
    size: str
    duration_seconds: str
    created_at: int
    input_image_url: str | None = None
    submitted_at: datetime = field(default_factory=datetime.now)
