"""FastAPI surface for the turn procedure."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from debate_arena.config import Settings, settings
from debate_arena.turns import TurnProcessor, build_turn_processor

from .routes import router

logger = logging.getLogger(__name__)


def create_app(app_settings: Settings | None = None, *, processor: TurnProcessor | None = None) -> FastAPI:
    """Build the app, refusing to start without both provider keys."""
    app_settings = app_settings or settings
    app_settings.require_provider_keys()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if processor is not None:
            app.state.turn_processor = processor
            yield
            return

        async with httpx.AsyncClient() as client:
            app.state.turn_processor = build_turn_processor(app_settings, client)
            logger.info(
                "turn_server_ready",
                extra={"chat_model": app_settings.chat_model, "voice_model": app_settings.voice_model},
            )
            yield

    app = FastAPI(title=app_settings.app_name, lifespan=lifespan)
    app.state.settings = app_settings
    app.include_router(router)
    return app
