import httpx
import pytest
from pydantic import ValidationError

from conftest import REQUIRED_ENV, InMemoryArtifactStore
from promptreel.config import load_settings
from promptreel.errors import ConfigurationError
from promptreel.main import build_video_service


def test_defaults_follow_provider_profiles(required_env):
    settings = load_settings(_env_file=None)

    assert settings.GCP_STORAGE_BUCKET_NAME == "test-bucket"
    assert settings.OPENAI_BASE_URL == "https://api.openai.com/v1"
    assert (settings.SORA_POLL_TIMEOUT, settings.SORA_POLL_INTERVAL) == (300, 5)
    assert (settings.KIE_POLL_TIMEOUT, settings.KIE_POLL_INTERVAL) == (600, 10)
    assert settings.KIE_MODEL == "veo3_fast"
    assert settings.SORA_MODEL == "sora-2"


@pytest.mark.parametrize("missing", sorted(REQUIRED_ENV))
def test_missing_required_value_is_fatal(required_env, monkeypatch, missing):
    monkeypatch.delenv(missing)

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(_env_file=None)

    assert missing in str(exc_info.value)


def test_empty_required_value_is_fatal(required_env, monkeypatch):
    monkeypatch.setenv("KIE_API_KEY", "")

    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None)


def test_settings_are_immutable(required_env):
    settings = load_settings(_env_file=None)

    with pytest.raises(ValidationError):
        settings.KIE_API_KEY = "other"


def test_service_wiring_uses_configured_profiles(required_env, monkeypatch):
    monkeypatch.setenv("KIE_POLL_INTERVAL", "15")
    settings = load_settings(_env_file=None)
    client = httpx.AsyncClient()

    service = build_video_service(settings, client, store=InMemoryArtifactStore())

    sora = service.get_provider("sora")
    kie = service.get_provider("kie")
    assert (sora.poll_timeout, sora.poll_interval) == (300, 5)
    assert (kie.poll_timeout, kie.poll_interval) == (600, 15)
    assert kie.create_url == REQUIRED_ENV["KIE_VEO_URL"]
    assert sora.http_client is client is kie.http_client
