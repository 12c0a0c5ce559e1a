"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import ServiceSettings
from core import BaseLLMClient, ServiceError
from logs.logging_config import setup_llm_logging
from translation import router as translation_router
from translation.llm_client import TranslationClient, create_translation_llm_client
from chat import router as chat_router
from chat.llm_client import create_chat_llm_client

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[ServiceSettings] = None,
    translation_client: Optional[TranslationClient] = None,
    chat_llm_client: Optional[BaseLLMClient] = None,
) -> FastAPI:
    """
    Assemble the application.

    Args:
        settings: Service settings (read from the environment if not given)
        translation_client: Client used by /translate (built from settings if not given)
        chat_llm_client: Client used by /chat (built from settings if not given)
    """
    setup_llm_logging()
    settings = settings or ServiceSettings.from_env()
    translation_client = translation_client or TranslationClient(create_translation_llm_client(settings))
    chat_llm_client = chat_llm_client or create_chat_llm_client(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logger.info(
            "Translation service starting | model=%s | auth=%s | output_encoding=%s",
            settings.model,
            "enabled" if settings.client_token else "disabled",
            settings.output_encoding,
        )
        if not settings.api_key:
            logger.warning("OPENAI_API_KEY is not set; /translate and /chat will answer 500")

        yield

        # Shutdown: close pooled HTTP sessions
        await translation_client.close()
        await chat_llm_client.close()

    app = FastAPI(
        title="Korean-Uzbek Translation API",
        description="Korean to Uzbek (Latin script) translation with validated LLM retries",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.translation_client = translation_client
    app.state.chat_llm_client = chat_llm_client

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error | path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"ok": False, "error": str(exc)})

    # Include routers
    app.include_router(translation_router)
    app.include_router(chat_router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}

    return app


if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
