"""Pydantic schemas for identity endpoints."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class CredentialsRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class TokenRedeemRequest(BaseModel):
    token: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    access_token: str
    user_id: UUID
    token_type: str = "bearer"
    email: str | None = None
    is_anonymous: bool = False


class IdentityResponse(BaseModel):
    user_id: UUID
    email: str | None = None
    is_anonymous: bool = False
    created_at: datetime


__all__ = [
    "AuthResponse",
    "CredentialsRequest",
    "IdentityResponse",
    "LoginRequest",
    "TokenRedeemRequest",
]
