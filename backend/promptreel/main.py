"""PromptReel — FastAPI application entry point.

Builds the settings, the shared HTTP client, the provider clients and the
artifact store once on startup, and mounts the API routes.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promptreel import __version__
from promptreel.api.router import api_router
from promptreel.config import Settings, load_settings
from promptreel.services.providers import KieVideoProvider, SoraVideoProvider
from promptreel.services.storage import ArtifactStore, GcsArtifactStore
from promptreel.services.video_gen import VideoGenerationService

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_video_service(
    settings: Settings,
    http_client: httpx.AsyncClient,
    store: ArtifactStore | None = None,
) -> VideoGenerationService:
    """Wire the providers and the artifact store into the orchestrator."""
    providers = {
        "sora": SoraVideoProvider.from_settings(settings, http_client),
        "kie": KieVideoProvider.from_settings(settings, http_client),
    }
    if store is None:
        store = GcsArtifactStore.from_settings(settings)
    return VideoGenerationService(providers, store)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI app. Settings are loaded at startup when not given."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Missing configuration raises ConfigurationError here and aborts startup.
        app_settings = settings or load_settings()
        configure_logging(app_settings)
        logger.info("%s starting up...", app_settings.APP_NAME)
        logger.info("Storage bucket: %s", app_settings.GCP_STORAGE_BUCKET_NAME)

        async with httpx.AsyncClient(timeout=app_settings.HTTP_TIMEOUT) as http_client:
            app.state.settings = app_settings
            app.state.video_service = build_video_service(app_settings, http_client)
            yield

        logger.info("%s shut down", app_settings.APP_NAME)

    app = FastAPI(
        title="PromptReel API",
        description="Prompt-to-video generation through Sora and Veo 3, stored in GCS",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # CORS — configurable via CORS_ORIGINS env
    cors_origins = os.environ.get(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"service": "PromptReel", "status": "running"}

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()
