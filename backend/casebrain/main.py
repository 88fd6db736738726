import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api import chat, documents, knowledge, prioritize, strategy, transcribe
from .config import settings
from .engine.llm import ModelClient, OpenAIModel
from .engine.realtime import OpenAIRealtimeTranscription
from .engine.transcriber import SessionFactory
from .engine.workspace import CaseWorkspace

logger = logging.getLogger(__name__)


def create_app(
    model: ModelClient | None = None,
    connect_transcription: SessionFactory | None = None,
) -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        workspace = CaseWorkspace.for_profile(
            settings.case_profile,
            model or OpenAIModel(),
            connect_transcription or OpenAIRealtimeTranscription.connect,
        )
        app.state.workspace = workspace
        try:
            yield
        finally:
            await workspace.close()

    app = FastAPI(title="CaseBrain", lifespan=lifespan)
    for module in (knowledge, chat, prioritize, strategy, documents, transcribe):
        app.include_router(module.router)
    return app


app = create_app()
