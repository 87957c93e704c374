"""Integration tests for the community chat collection routes."""
from __future__ import annotations

import os
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_padayon.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from padayon.database import Base, SessionLocal, engine  # noqa: E402
from padayon.main import app  # noqa: E402
from padayon.models import CommunityMessage, User, WallPost  # noqa: E402

MESSAGES_URL = "/apps/test-app/community_messages"


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(CommunityMessage))
        session.execute(delete(WallPost))
        session.execute(delete(User))
        session.commit()
    yield


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def test_send_and_list_messages(client: TestClient) -> None:
    guest = client.post("/auth/anonymous").json()
    headers = {"Authorization": f"Bearer {guest['access_token']}"}

    first = client.post(MESSAGES_URL, json={"content": "hi all", "author_name": "Guest"}, headers=headers)
    second = client.post(MESSAGES_URL, json={"content": "how are you?", "author_name": "Guest"}, headers=headers)
    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["author_id"] == guest["user_id"]

    items = client.get(MESSAGES_URL).json()["items"]
    assert {item["content"] for item in items} == {"hi all", "how are you?"}
    assert all(item["created_at"] for item in items)


def test_message_requires_identity_and_content(client: TestClient) -> None:
    assert client.post(MESSAGES_URL, json={"content": "hi", "author_name": "Guest"}).status_code == 401

    guest = client.post("/auth/anonymous").json()
    headers = {"Authorization": f"Bearer {guest['access_token']}"}
    blank = client.post(MESSAGES_URL, json={"content": " \n ", "author_name": "Guest"}, headers=headers)
    assert blank.status_code == 422


def test_unknown_collection_stream_is_404(client: TestClient) -> None:
    assert client.get("/apps/test-app/private_notes/stream").status_code == 404


def test_health_and_api_info(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/api").json()["name"] == "Padayon"
