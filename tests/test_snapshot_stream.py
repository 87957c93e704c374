"""Tests for the live collection channels behind the stream endpoint."""
from __future__ import annotations

import asyncio
import json
import os
from typing import Iterator

import pytest
from sqlalchemy import delete

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_padayon.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from padayon.constants import POSTS_COLLECTION  # noqa: E402
from padayon.database import Base, SessionLocal, engine  # noqa: E402
from padayon.models import CommunityMessage, User, WallPost  # noqa: E402
from padayon.routers.realtime import collection_stream  # noqa: E402
from padayon.schemas import WallPostCreate  # noqa: E402
from padayon.services import (  # noqa: E402
    CollectionStreamManager,
    channel_key,
    collection_snapshot,
    collection_stream_manager,
    create_post_record,
    publish_collection,
)
from padayon.services.snapshot_stream import encode_event, error_event, snapshot_event  # noqa: E402


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


def test_events_are_newline_delimited_json() -> None:
    line = encode_event(snapshot_event("community_messages", [{"id": "1"}]))
    assert line.endswith("\n")
    assert json.loads(line) == {"type": "snapshot", "collection": "community_messages", "documents": [{"id": "1"}]}
    assert json.loads(encode_event(error_event("x", "boom")))["type"] == "error"


def test_listener_gets_initial_snapshot_then_published_events() -> None:
    async def scenario() -> None:
        manager = CollectionStreamManager()
        channel = channel_key("app", POSTS_COLLECTION)
        queue = await manager.subscribe(channel)
        stream = manager.listen(channel, queue, snapshot_event(POSTS_COLLECTION, []))

        first = json.loads(await stream.__anext__())
        assert first["documents"] == []
        assert await manager.listener_count(channel) == 1

        await manager.publish(channel, snapshot_event(POSTS_COLLECTION, [{"id": "a"}]))
        second = json.loads(await stream.__anext__())
        assert second["documents"] == [{"id": "a"}]

        await stream.aclose()
        assert await manager.listener_count(channel) == 0

    asyncio.run(scenario())


def test_publish_to_other_channel_is_not_delivered() -> None:
    async def scenario() -> None:
        manager = CollectionStreamManager()
        queue = await manager.subscribe(channel_key("app-a", POSTS_COLLECTION))
        await manager.publish(channel_key("app-b", POSTS_COLLECTION), snapshot_event(POSTS_COLLECTION, []))
        assert queue.empty()

    asyncio.run(scenario())


def test_slow_listener_keeps_only_newest_snapshots() -> None:
    async def scenario() -> None:
        manager = CollectionStreamManager()
        channel = channel_key("app", POSTS_COLLECTION)
        queue = await manager.subscribe(channel)
        for index in range(queue.maxsize + 3):
            await manager.publish(channel, snapshot_event(POSTS_COLLECTION, [{"id": str(index)}]))

        assert queue.full()
        oldest = queue.get_nowait()
        assert oldest["documents"] == [{"id": "3"}]

    asyncio.run(scenario())


def test_write_publishes_full_collection_snapshot() -> None:
    async def scenario() -> None:
        channel = channel_key("stream-app", POSTS_COLLECTION)
        queue = await collection_stream_manager.subscribe(channel)
        try:
            with SessionLocal() as db:
                author = User(is_anonymous=True)
                db.add(author)
                db.commit()
                create_post_record(
                    db,
                    app_id="stream-app",
                    author=author,
                    payload=WallPostCreate(content="first", author_name="Guest"),
                )
                create_post_record(
                    db,
                    app_id="stream-app",
                    author=author,
                    payload=WallPostCreate(content="second", author_name="Guest"),
                )
                await publish_collection(db, app_id="stream-app", collection=POSTS_COLLECTION)
                expected = collection_snapshot(db, app_id="stream-app", collection=POSTS_COLLECTION)

            event = queue.get_nowait()
            assert event["type"] == "snapshot"
            assert {doc["content"] for doc in event["documents"]} == {"first", "second"}
            assert event == expected
        finally:
            await collection_stream_manager.unsubscribe(channel, queue)

    asyncio.run(scenario())


def test_write_between_opening_and_reading_stream_is_delivered() -> None:
    async def scenario() -> None:
        channel = channel_key("gap-app", POSTS_COLLECTION)
        response = await collection_stream("gap-app", POSTS_COLLECTION)
        assert await collection_stream_manager.listener_count(channel) == 1

        with SessionLocal() as db:
            author = User(is_anonymous=True)
            db.add(author)
            db.commit()
            create_post_record(
                db,
                app_id="gap-app",
                author=author,
                payload=WallPostCreate(content="written in the gap", author_name="Guest"),
            )
            await publish_collection(db, app_id="gap-app", collection=POSTS_COLLECTION)

        body = response.body_iterator
        initial = json.loads(await body.__anext__())
        assert initial["documents"] == []
        follow_up = json.loads(await asyncio.wait_for(body.__anext__(), timeout=1))
        assert [doc["content"] for doc in follow_up["documents"]] == ["written in the gap"]

        await body.aclose()
        assert await collection_stream_manager.listener_count(channel) == 0

    asyncio.run(scenario())
