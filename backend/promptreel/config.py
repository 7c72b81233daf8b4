"""Application configuration using Pydantic Settings."""

from __future__ import annotations

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from promptreel.errors import ConfigurationError


class Settings(BaseSettings):
    """PromptReel application settings.

    Loaded from environment variables or .env file. Built once at startup and
    handed to the providers and the artifact store; never mutated afterwards.
    """

    # --- Application ---
    APP_NAME: str = "PromptReel"
    DEBUG: bool = False

    # --- HTTP ---
    HTTP_TIMEOUT: float = 60.0

    # --- OpenAI Sora ---
    OPENAI_API_KEY: str = Field(min_length=1)
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    SORA_MODEL: str = "sora-2"
    SORA_SECONDS: str = "4"
    SORA_POLL_TIMEOUT: float = 5 * 60
    SORA_POLL_INTERVAL: float = 5

    # --- Kie (Veo 3) ---
    KIE_API_KEY: str = Field(min_length=1)
    KIE_VEO_URL: str = Field(min_length=1)
    KIE_STATUS_URL: str = Field(min_length=1)
    KIE_MODEL: str = "veo3_fast"
    KIE_ASPECT_RATIO: str = "9:16"
    KIE_POLL_TIMEOUT: float = 10 * 60
    KIE_POLL_INTERVAL: float = 10

    # --- Google Cloud Storage ---
    GCP_STORAGE_BUCKET_NAME: str = Field(min_length=1)
    GCP_PROJECT_ID: str = Field(min_length=1)
    GCP_CREDENTIALS: str = Field(min_length=1)  # path to service-account JSON

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )


def load_settings(**overrides) -> Settings:
    """Build the settings, turning validation failures into a ConfigurationError.

    Missing or empty required variables are fatal at startup, never per request.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        names = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ConfigurationError(
            f"Missing or invalid environment variables: {', '.join(names)}"
        ) from e
