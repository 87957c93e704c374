"""Gateways from the app core to the identity provider and the document collections."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Protocol

import httpx

from ..constants import API_KEY_HEADER
from .context import BackendDescriptor, Identity, IdentityKind
from .errors import AuthError, GatewayError

logger = logging.getLogger(__name__)


class IdentityGateway(Protocol):
    def watch(self) -> AsyncIterator[Identity | None]:
        """Yield the current identity, then every change (``None`` when signed out)."""
        ...

    async def sign_in_anonymously(self) -> Identity: ...

    async def redeem_token(self, token: str) -> Identity: ...

    async def sign_in(self, email: str, password: str) -> Identity: ...

    async def sign_up(self, email: str, password: str) -> Identity: ...

    async def sign_out(self) -> None: ...


class CollectionGateway(Protocol):
    def subscribe(self, collection: str) -> AsyncIterator[list[dict[str, Any]]]:
        """Yield the full document set of ``collection`` after every change."""
        ...

    async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]: ...

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> dict[str, Any]: ...

    async def delete(self, collection: str, document_id: str) -> None: ...


class AuthStateStream:
    """Holds the provider-side identity and wakes every watcher when it changes.

    Watchers always read the latest identity, so a burst of changes collapses
    into one wake-up.
    """

    def __init__(self) -> None:
        self._current: Identity | None = None
        self._watchers: set[asyncio.Event] = set()

    @property
    def current(self) -> Identity | None:
        return self._current

    def set(self, identity: Identity | None) -> None:
        self._current = identity
        for changed in list(self._watchers):
            changed.set()

    async def watch(self) -> AsyncIterator[Identity | None]:
        changed = asyncio.Event()
        self._watchers.add(changed)
        try:
            yield self._current
            while True:
                await changed.wait()
                changed.clear()
                yield self._current
        finally:
            self._watchers.discard(changed)


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return (response.text or "").strip() or response.reason_phrase
    detail = payload.get("detail") if isinstance(payload, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail and isinstance(detail[0], dict):
        return str(detail[0].get("msg") or response.reason_phrase)
    return response.reason_phrase


def _identity_from_auth(payload: dict[str, Any]) -> Identity:
    email = payload.get("email") or None
    return Identity(
        user_id=str(payload["user_id"]),
        kind=IdentityKind.EMAIL if email else IdentityKind.ANONYMOUS,
        email=email,
        access_token=payload.get("access_token"),
    )


class HttpBackend:
    """``httpx``-backed implementation of both gateways against the Padayon service."""

    def __init__(
        self,
        descriptor: BackendDescriptor,
        *,
        app_id: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._app_id = app_id
        self._auth = AuthStateStream()
        self._client = httpx.AsyncClient(
            base_url=descriptor.base_url,
            headers={API_KEY_HEADER: descriptor.api_key},
            timeout=None,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        identity = self._auth.current
        if identity and identity.access_token:
            return {"Authorization": f"Bearer {identity.access_token}"}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        error_cls: type[GatewayError] = GatewayError,
    ) -> Any:
        try:
            response = await self._client.request(method, path, json=json_body, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Backend rejected request | method=%s path=%s status=%s",
                method,
                path,
                exc.response.status_code,
            )
            raise error_cls(_error_detail(exc.response), status_code=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            logger.error("Backend transport error | method=%s path=%s error=%s", method, path, type(exc).__name__)
            raise error_cls(f"Backend unreachable ({type(exc).__name__})") from exc

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise error_cls("Backend response was not valid JSON") from exc

    # Identity

    def watch(self) -> AsyncIterator[Identity | None]:
        return self._auth.watch()

    async def _authenticate(
        self,
        path: str,
        body: dict[str, Any] | None = None,
        *,
        replace: bool = True,
    ) -> Identity:
        payload = await self._request("POST", path, json_body=body, error_cls=AuthError)
        identity = _identity_from_auth(payload)
        if replace or self._auth.current is None:
            self._auth.set(identity)
        return identity

    async def sign_in_anonymously(self) -> Identity:
        """Issue an anonymous identity; it only becomes current when nobody is signed in."""

        return await self._authenticate("/auth/anonymous", replace=False)

    async def redeem_token(self, token: str) -> Identity:
        return await self._authenticate("/auth/token", {"token": token})

    async def sign_in(self, email: str, password: str) -> Identity:
        return await self._authenticate("/auth/login", {"email": email, "password": password})

    async def sign_up(self, email: str, password: str) -> Identity:
        return await self._authenticate("/auth/register", {"email": email, "password": password})

    async def sign_out(self) -> None:
        # Access tokens are stateless; dropping ours ends the session.
        self._auth.set(None)

    # Collections

    def _collection_path(self, collection: str) -> str:
        return f"/apps/{self._app_id}/{collection}"

    async def subscribe(self, collection: str) -> AsyncIterator[list[dict[str, Any]]]:
        path = f"{self._collection_path(collection)}/stream"
        try:
            async with self._client.stream("GET", path, headers=self._headers()) as response:
                if response.is_error:
                    await response.aread()
                    raise GatewayError(_error_detail(response), status_code=response.status_code)
                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        event = json.loads(line)
                    except ValueError as exc:
                        raise GatewayError("Malformed snapshot event") from exc
                    if event.get("type") == "error":
                        raise GatewayError(str(event.get("detail") or "Subscription failed"))
                    if event.get("type") == "snapshot":
                        yield list(event.get("documents") or [])
        except httpx.HTTPError as exc:
            logger.error("Subscription transport error | path=%s error=%s", path, type(exc).__name__)
            raise GatewayError(f"Subscription lost ({type(exc).__name__})") from exc

    async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", self._collection_path(collection), json_body=document)

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", f"{self._collection_path(collection)}/{document_id}", json_body=fields)

    async def delete(self, collection: str, document_id: str) -> None:
        await self._request("DELETE", f"{self._collection_path(collection)}/{document_id}")


__all__ = [
    "AuthStateStream",
    "CollectionGateway",
    "HttpBackend",
    "IdentityGateway",
]
