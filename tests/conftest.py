"""Pytest configuration helpers.

This conftest ensures ``backend/`` is on `sys.path` so tests can import the
`promptreel` package without installing it, and provides the shared fakes:
a deterministic clock, an in-memory artifact store and scripted status
sequences.
"""
import os
import sys

import httpx
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
BACKEND = os.path.join(ROOT, "backend")
if BACKEND not in sys.path:
    sys.path.insert(0, BACKEND)

from promptreel.errors import StorageError  # noqa: E402
from promptreel.services.storage import ArtifactStore  # noqa: E402

BUCKET = "test-bucket"

REQUIRED_ENV = {
    "OPENAI_API_KEY": "sk-test",
    "KIE_API_KEY": "kie-test",
    "KIE_VEO_URL": "https://kie.test/api/v1/veo/generate",
    "KIE_STATUS_URL": "https://kie.test/api/v1/veo/record-info",
    "GCP_STORAGE_BUCKET_NAME": BUCKET,
    "GCP_PROJECT_ID": "test-project",
    "GCP_CREDENTIALS": "/nonexistent/credentials.json",
}


class FakeClock:
    """Monotonic clock that only advances when something sleeps on it."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class InMemoryArtifactStore(ArtifactStore):
    """Artifact store keeping objects in a dict, with GCS-style public URLs."""

    def __init__(self, events: list | None = None, fail_on: str | None = None):
        super().__init__(time_ms=lambda: 1700000000000)
        self.objects: dict[str, dict] = {}
        self.events = events if events is not None else []
        self.fail_on = fail_on

    async def put(self, data, key, *, content_type, metadata=None):
        self.events.append(("put", key))
        if self.fail_on and key.startswith(self.fail_on):
            raise StorageError(f"Failed to upload {key} to storage")
        self.objects[key] = {
            "data": data,
            "content_type": content_type,
            "metadata": dict(metadata or {}),
        }
        return f"https://storage.googleapis.com/{BUCKET}/{key}"


class ScriptedStatus:
    """Status function replaying a fixed sequence; the last entry repeats.

    Entries that are exceptions are raised instead of returned.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[str] = []

    async def __call__(self, job_id: str):
        self.calls.append(job_id)
        idx = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[idx]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryArtifactStore()


@pytest.fixture
def required_env(monkeypatch):
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    return dict(REQUIRED_ENV)
