"""Identity provider: anonymous identities, sign-in tokens and email/password accounts."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Tuple
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import API_KEY_HEADER
from ..database import get_session
from ..models import User
from ..schemas import CredentialsRequest
from ..security.secrets import MissingSecretError, require_secret

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
DEFAULT_TOKEN_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))
SIGN_IN_TOKEN_MINUTES = 60

_ACCESS_TOKEN_USE = "access"
_SIGN_IN_TOKEN_USE = "sign-in"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    subject: UUID
    anonymous: bool
    email: str | None = None


@lru_cache(maxsize=1)
def _get_jwt_secret() -> str:
    try:
        return require_secret("JWT_SECRET_KEY")
    except MissingSecretError as exc:
        raise RuntimeError(str(exc)) from exc


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""

    return _pwd_context.hash(password)


def verify_password(password: str, hashed_password: str | None) -> bool:
    """Verify that ``password`` matches ``hashed_password``."""

    if not hashed_password:
        return False
    try:
        return _pwd_context.verify(password, hashed_password)
    except Exception:  # pragma: no cover - passlib internal errors are rare
        logger.exception("Password verification failed due to an unexpected error")
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _encode(claims: dict, *, expires_minutes: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + timedelta(minutes=expires_minutes)}
    return jwt.encode(payload, _get_jwt_secret(), algorithm=ALGORITHM)


def _decode(token: str, *, expected_use: str) -> TokenClaims:
    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[ALGORITHM])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    if payload.get("use") != expected_use:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    try:
        user_id = UUID(subject)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload") from exc

    email = payload.get("email")
    return TokenClaims(subject=user_id, anonymous=bool(payload.get("anon")), email=email or None)


def create_access_token(user: User, *, expires_minutes: Optional[int] = None) -> str:
    """Create a signed access token for ``user``."""

    claims = {"sub": str(user.id), "anon": bool(user.is_anonymous), "use": _ACCESS_TOKEN_USE}
    return _encode(claims, expires_minutes=expires_minutes or DEFAULT_TOKEN_MINUTES)


def decode_access_token(token: str) -> TokenClaims:
    """Decode and validate an access token."""

    return _decode(token, expected_use=_ACCESS_TOKEN_USE)


def issue_sign_in_token(user_id: UUID, *, email: str | None = None, expires_minutes: int = SIGN_IN_TOKEN_MINUTES) -> str:
    """Mint a pre-issued sign-in token that a client can redeem once at startup."""

    claims: dict = {"sub": str(user_id), "use": _SIGN_IN_TOKEN_USE, "anon": email is None}
    if email:
        claims["email"] = normalize_email(email)
    return _encode(claims, expires_minutes=expires_minutes)


def _commit_new_user(db: Session, user: User, *, failure_detail: str) -> User:
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to persist identity")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_detail) from exc
    return user


def create_anonymous_user(db: Session) -> Tuple[User, str]:
    """Issue a brand-new anonymous identity."""

    user = _commit_new_user(db, User(is_anonymous=True), failure_detail="Unable to issue anonymous identity")
    return user, create_access_token(user)


def register_user(db: Session, payload: CredentialsRequest) -> Tuple[User, str]:
    """Persist a new email/password identity and return it with an access token."""

    email = normalize_email(str(payload.email))
    existing = db.scalar(select(User).where(User.email == email))
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(email=email, hashed_password=hash_password(payload.password), is_anonymous=False)
    user = _commit_new_user(db, user, failure_detail="Unable to register user")
    return user, create_access_token(user)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate an email/password identity against stored credentials."""

    user = db.scalar(select(User).where(User.email == normalize_email(email)))
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def redeem_sign_in_token(db: Session, token: str) -> Tuple[User, str]:
    """Exchange a pre-issued sign-in token for an access token.

    The identity named by the token is created on first redemption, mirroring
    how hosted identity providers treat externally minted tokens.
    """

    claims = _decode(token, expected_use=_SIGN_IN_TOKEN_USE)
    user = db.get(User, claims.subject)
    if user is None:
        user = User(id=claims.subject, email=claims.email, is_anonymous=claims.email is None)
        user = _commit_new_user(db, user, failure_detail="Unable to redeem sign-in token")
    return user, create_access_token(user)


async def require_api_key(api_key: str | None = Header(default=None, alias=API_KEY_HEADER)) -> None:
    """Reject requests that do not carry the deployment API key, when one is configured."""

    expected = get_settings().backend_api_key
    if expected and api_key != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_security),
    db: Session = Depends(get_session),
) -> User:
    """Resolve the signed-in identity (anonymous or email) from the bearer token."""

    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    claims = decode_access_token(credentials.credentials)

    user = db.get(User, claims.subject)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    return user


__all__ = [
    "TokenClaims",
    "authenticate_user",
    "create_access_token",
    "create_anonymous_user",
    "decode_access_token",
    "get_current_user",
    "hash_password",
    "issue_sign_in_token",
    "normalize_email",
    "redeem_sign_in_token",
    "register_user",
    "require_api_key",
    "verify_password",
]
