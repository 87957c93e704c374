"""Application entry point for the Padayon backend service."""
from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .database import init_db
from .routers import auth_router, messages_router, posts_router, professionals_router, realtime_router

logger = logging.getLogger(__name__)

settings = get_settings()
APP_NAME = settings.app_name
API_VERSION = settings.api_version


def _cors_origins(raw: str | None) -> list[str]:
    """Comma-separated origins from ``CORS_ORIGINS``; any origin when unset."""

    origins = [origin.strip() for origin in (raw or "").split(",") if origin.strip()]
    return origins or ["*"]


app = FastAPI(title=APP_NAME, version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(os.getenv("CORS_ORIGINS")),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(posts_router)
app.include_router(messages_router)
app.include_router(realtime_router)
app.include_router(professionals_router)


@app.on_event("startup")
async def _startup() -> None:
    """Ensure the database schema exists before serving."""

    try:
        init_db()
    except Exception:  # pragma: no cover - best effort logging
        logger.exception("Database initialisation failed")
        raise
    logger.info("%s %s ready | app_id=%s", APP_NAME, API_VERSION, settings.app_id)


@app.get("/api", tags=["meta"])
async def api_root() -> dict[str, str]:
    return {"name": APP_NAME, "version": API_VERSION}


@app.get("/health", tags=["meta"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


__all__ = ["app"]
