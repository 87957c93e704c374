"""
Runtime configuration helpers shared by the backend service and the app core.

Loads variables from the process environment first and from the ``.env`` file
located in the project root second.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    # Deployment namespace and client connection surface
    app_id: str = Field(default="default-padayon-app", alias="APP_ID")
    backend_config: str = Field(default="{}", alias="BACKEND_CONFIG")
    initial_auth_token: str | None = Field(default=None, alias="INITIAL_AUTH_TOKEN")

    # Generative-text endpoint
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.0-flash", alias="GEMINI_MODEL")
    gemini_api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_API_BASE",
    )

    # Backend service
    database_url: str = Field(default="sqlite+pysqlite:///./padayon.db", alias="DATABASE_URL")
    app_name: str = Field(default="Padayon", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")
    backend_api_key: str | None = Field(default=None, alias="BACKEND_API_KEY")

    # Presentation
    ui_locale: str = Field(default="en", alias="UI_LOCALE")
    ui_theme: str = Field(default="rose", alias="UI_THEME")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
