"""FastAPI application for the assistant chat backend.

``create_app`` wires the per-application thread store, CORS and the chat
router. The module-level ``app`` is what uvicorn serves.
"""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from assistant_chat import __version__
from assistant_chat.api.chat import router as chat_router
from assistant_chat.threads.store import InMemoryThreadStore

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Log startup and shutdown.

    Gateway configuration is read per request, so nothing is validated here.
    """
    logger.info(f"Starting Assistant Chat API v{__version__}")
    yield
    logger.info(f"Shutting down Assistant Chat API ({len(app.state.thread_store)} threads tracked)")


def create_app() -> FastAPI:
    """Build the chat API.

    Each application owns its own thread affinity store, so test apps never
    share conversation threads.

    Returns:
        FastAPI application with the chat router and health check mounted.
    """
    application = FastAPI(
        title="Assistant Chat API",
        description=(
            "Chat backend for a hosted Azure OpenAI assistant. Each turn posts the "
            "user's message to the caller's conversation thread, runs the assistant, "
            "waits for the run to finish, and returns the thread messages."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    application.state.thread_store = InMemoryThreadStore()

    application.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    application.include_router(chat_router)

    @application.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "assistant-chat"}

    return application


app = create_app()
