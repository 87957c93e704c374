"""SQLAlchemy engine and sessions for the document collections and identities."""
from __future__ import annotations

from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"pool_pre_ping": True, "future": True}
    if url.startswith("sqlite"):
        # Streaming handlers open their own sessions off the request thread.
        options["connect_args"] = {"check_same_thread": False}
    return options


engine: Engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

SessionLocal = sessionmaker(bind=engine, autoflush=False, future=True, expire_on_commit=False)

Base = declarative_base()


def get_session() -> Generator[Session, None, None]:
    """Request-scoped session dependency."""
    with SessionLocal() as session:
        yield session


def create_session() -> Session:
    """Session for work outside a request, such as building an initial stream snapshot."""
    return SessionLocal()


def init_db() -> None:
    """Create the identity and collection tables when they do not exist yet."""
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_session",
    "create_session",
    "init_db",
]
