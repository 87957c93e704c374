"""Shared fixtures: in-memory gateways and a stub text generator for the app core."""
from __future__ import annotations

import asyncio
import itertools
import os
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator, Awaitable, Callable, Sequence
from uuid import uuid4

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_padayon.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from padayon.client import AuthError, AuthStateStream, GatewayError, Identity, IdentityKind, PadayonApp  # noqa: E402
from padayon.constants import COLLECTIONS, POSTS_COLLECTION  # noqa: E402

_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)

GOOD_REPLY = {"candidates": [{"content": {"parts": [{"text": "Take a slow breath."}]}}]}


class InMemoryBackend:
    """Identity provider and document store that live in the test's event loop."""

    def __init__(self) -> None:
        self.auth = AuthStateStream()
        self.accounts: dict[str, tuple[str, str]] = {}
        self.documents: dict[str, list[dict[str, Any]]] = {name: [] for name in COLLECTIONS}
        self.calls: list[tuple[str, str]] = []
        self.reaction_writes: list[int] = []
        self.valid_tokens: dict[str, Identity] = {}
        self.failures: dict[str, Exception] = {}
        self._listeners: dict[str, set[asyncio.Queue[Any]]] = {name: set() for name in COLLECTIONS}
        self._clock = itertools.count(1)

    # identity

    def watch(self) -> AsyncIterator[Identity | None]:
        return self.auth.watch()

    def _check(self, operation: str) -> None:
        error = self.failures.get(operation)
        if error is not None:
            raise error

    async def sign_in_anonymously(self) -> Identity:
        self._check("sign_in_anonymously")
        identity = Identity(str(uuid4()), IdentityKind.ANONYMOUS, access_token="anon-token")
        if self.auth.current is None:
            self.auth.set(identity)
        return identity

    async def redeem_token(self, token: str) -> Identity:
        identity = self.valid_tokens.get(token)
        if identity is None:
            raise AuthError("Invalid token", status_code=401)
        self.auth.set(identity)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        stored = self.accounts.get(email)
        if stored is None or stored[0] != password:
            raise AuthError("Invalid credentials", status_code=401)
        identity = Identity(stored[1], IdentityKind.EMAIL, email=email, access_token="email-token")
        self.auth.set(identity)
        return identity

    async def sign_up(self, email: str, password: str) -> Identity:
        if email in self.accounts:
            raise AuthError("Email already registered", status_code=409)
        user_id = str(uuid4())
        self.accounts[email] = (password, user_id)
        identity = Identity(user_id, IdentityKind.EMAIL, email=email, access_token="email-token")
        self.auth.set(identity)
        return identity

    async def sign_out(self) -> None:
        self._check("sign_out")
        self.auth.set(None)

    # collections

    def listener_count(self, collection: str) -> int:
        return len(self._listeners[collection])

    def _publish(self, collection: str) -> None:
        snapshot = [dict(doc) for doc in self.documents[collection]]
        for queue in list(self._listeners[collection]):
            queue.put_nowait(snapshot)

    def break_subscription(self, collection: str, error: Exception | None = None) -> None:
        for queue in list(self._listeners[collection]):
            queue.put_nowait(error or GatewayError("stream closed"))

    async def subscribe(self, collection: str) -> AsyncIterator[list[dict[str, Any]]]:
        queue: asyncio.Queue[Any] = asyncio.Queue()
        self._listeners[collection].add(queue)
        try:
            yield [dict(doc) for doc in self.documents[collection]]
            while True:
                item = await queue.get()
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            self._listeners[collection].discard(queue)

    def seed(self, collection: str, **fields: Any) -> dict[str, Any]:
        document = {"id": str(uuid4()), "created_at": self._next_timestamp(), **fields}
        self.documents[collection].append(document)
        return document

    def _next_timestamp(self) -> str:
        return (_EPOCH + timedelta(seconds=next(self._clock))).isoformat()

    async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("insert", collection))
        self._check("insert")
        identity = self.auth.current
        stored = {
            **document,
            "id": str(uuid4()),
            "author_id": identity.user_id if identity else None,
            "created_at": self._next_timestamp(),
        }
        if collection == POSTS_COLLECTION:
            stored.setdefault("reactions", 0)
        self.documents[collection].append(stored)
        self._publish(collection)
        return dict(stored)

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("update", collection))
        self._check("update")
        await asyncio.sleep(0)
        for document in self.documents[collection]:
            if document["id"] == document_id:
                document.update(fields)
                if "reactions" in fields:
                    self.reaction_writes.append(fields["reactions"])
                self._publish(collection)
                return dict(document)
        raise GatewayError("Post not found", status_code=404)

    async def delete(self, collection: str, document_id: str) -> None:
        self.calls.append(("delete", collection))
        self._check("delete")
        self.documents[collection] = [doc for doc in self.documents[collection] if doc["id"] != document_id]
        self._publish(collection)


class StubGenerator:
    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.response = GOOD_REPLY if response is None else response
        self.error = error
        self.calls: list[list[dict[str, Any]]] = []

    async def generate(self, contents: Sequence[dict[str, Any]]) -> Any:
        self.calls.append(list(contents))
        if self.error is not None:
            raise self.error
        return self.response


async def _wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def generator() -> StubGenerator:
    return StubGenerator()


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    return _wait_until


@pytest.fixture
def make_app(backend: InMemoryBackend, generator: StubGenerator) -> Callable[..., PadayonApp]:
    def _make(**kwargs: Any) -> PadayonApp:
        options: dict[str, Any] = {"app_id": "test-app", "feedback_seconds": 0.05}
        options.update(kwargs)
        return PadayonApp.create(identity=backend, collections=backend, generator=generator, **options)

    return _make
