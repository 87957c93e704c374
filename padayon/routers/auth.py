"""Identity endpoints: anonymous sessions, sign-in tokens and email accounts."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import AuthResponse, CredentialsRequest, IdentityResponse, LoginRequest, TokenRedeemRequest
from ..services import (
    authenticate_user,
    create_access_token,
    create_anonymous_user,
    get_current_user,
    redeem_sign_in_token,
    register_user,
    require_api_key,
)

router = APIRouter(prefix="/auth", tags=["auth"], dependencies=[Depends(require_api_key)])
logger = logging.getLogger(__name__)


def _to_auth_response(user: User, token: str) -> AuthResponse:
    return AuthResponse(
        access_token=token,
        user_id=user.id,
        email=user.email,
        is_anonymous=bool(user.is_anonymous),
    )


@router.post("/anonymous", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def anonymous_endpoint(db: Session = Depends(get_session)) -> AuthResponse:
    user, token = create_anonymous_user(db)
    logger.info("Issued anonymous identity %s", user.id)
    return _to_auth_response(user, token)


@router.post("/token", response_model=AuthResponse)
async def redeem_token_endpoint(
    payload: TokenRedeemRequest,
    db: Session = Depends(get_session),
) -> AuthResponse:
    user, token = redeem_sign_in_token(db, payload.token)
    return _to_auth_response(user, token)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_endpoint(
    payload: CredentialsRequest,
    db: Session = Depends(get_session),
) -> AuthResponse:
    user, token = register_user(db, payload)
    return _to_auth_response(user, token)


@router.post("/login", response_model=AuthResponse)
async def login_endpoint(
    payload: LoginRequest,
    db: Session = Depends(get_session),
) -> AuthResponse:
    user = authenticate_user(db, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _to_auth_response(user, create_access_token(user))


@router.get("/me", response_model=IdentityResponse)
async def me_endpoint(current_user: User = Depends(get_current_user)) -> IdentityResponse:
    return IdentityResponse(
        user_id=current_user.id,
        email=current_user.email,
        is_anonymous=bool(current_user.is_anonymous),
        created_at=current_user.created_at,
    )


__all__ = ["router"]
