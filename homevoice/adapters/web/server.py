"""FastAPI application factory and default wiring."""

import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from homevoice.adapters.storage.json_store import JsonTemperatureStore
from homevoice.adapters.voice.vapi_client import VapiClient
from homevoice.adapters.web.presentation import PresentationState
from homevoice.adapters.web.routes import rooms_router, voice_router
from homevoice.app import HomeVoiceApp
from homevoice.config import __version__, AppConfig


def _log(msg: str):
    print(msg, file=sys.stderr)


def create_app(
    home: HomeVoiceApp,
    presentation: PresentationState,
    voice: Optional[VapiClient] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        await home.shutdown()
        _log("[Server] controllers disposed")

    app = FastAPI(title="HomeVoice", version=__version__, lifespan=lifespan)
    app.state.home = home
    app.state.presentation = presentation
    app.state.voice = voice
    app.include_router(voice_router)
    app.include_router(rooms_router)
    return app


def build_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Wire the default adapters: JSON store, Vapi voice, polled presentation."""
    config = config or AppConfig.from_env()
    presentation = PresentationState()
    voice = VapiClient(config.voice)
    home = HomeVoiceApp(
        config,
        store=JsonTemperatureStore(config.storage_dir),
        voice=voice,
        navigation=presentation,
        health=presentation,
        current_page=presentation.get_current_page,
    )
    home.show_home()
    _log(f"[Server] HomeVoice {__version__} ready (voice {'on' if voice.is_configured else 'off'})")
    return create_app(home, presentation, voice)
