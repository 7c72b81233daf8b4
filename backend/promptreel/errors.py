"""Error taxonomy for the video generation workflow.

These classes are for internal logging and diagnosis. The HTTP layer collapses
them into two outward outcomes: timeout (408) and everything else (500).
"""

from __future__ import annotations


class VideoGenerationError(Exception):
    """Base class for every failure raised by the generation workflow."""


class ConfigurationError(VideoGenerationError):
    """Required configuration is missing or unusable. Fatal at startup."""


class SubmissionError(VideoGenerationError):
    """The provider rejected job creation or returned no job identifier."""


class TransientPollError(VideoGenerationError):
    """A status check failed in a recoverable way (network, parse, bad envelope)."""


class GenerationTimeoutError(VideoGenerationError, TimeoutError):
    """No terminal status was observed before the poll deadline."""

    def __init__(self, job_id: str, waited: float | None = None):
        self.job_id = job_id
        self.waited = waited
        msg = f"Video generation timed out for job {job_id}"
        if waited is not None:
            msg += f" after {waited:g}s"
        super().__init__(msg)


class GenerationFailedError(VideoGenerationError):
    """The provider declared the job failed, or completed without a usable result."""

    def __init__(self, job_id: str, reason: str):
        self.job_id = job_id
        self.reason = reason
        super().__init__(f"Video generation failed for job {job_id}: {reason}")


class PayloadTooLargeError(VideoGenerationError):
    """An artifact exceeds the maximum size accepted by the artifact store."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"Video generated is too large ({size} bytes). "
            f"Maximum size is {limit // (1024 * 1024)}MB."
        )


class StorageError(VideoGenerationError):
    """The artifact store (or the artifact source) rejected a read or write."""
