from __future__ import annotations  # FastAPI server proxying speech submissions to the scoring webhook

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from config.settings import settings
from observability import configure_logging
from storage.migrate import migrate


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:  # Build the proxy application
    configure_logging()
    migrate(settings.DB_PATH)
    application = FastAPI(title="English AI Check Proxy")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Content-Length", "X-Requested-With"],
    )
    application.include_router(router)
    logger.info(
        "Proxy ready webhook=%s mode=%s timeout=%ss",
        settings.WEBHOOK_URL,
        settings.FORWARD_MODE,
        settings.WEBHOOK_TIMEOUT_S,
    )
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_server:app", host="0.0.0.0", port=int(os.getenv("PORT", "5001")))
