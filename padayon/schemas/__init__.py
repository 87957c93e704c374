"""Convenience exports for schema layer."""
from .auth import AuthResponse, CredentialsRequest, IdentityResponse, LoginRequest, TokenRedeemRequest
from .messages import CommunityMessageCreate, CommunityMessageListResponse, CommunityMessageResponse
from .posts import WallPostCreate, WallPostListResponse, WallPostReactionUpdate, WallPostResponse
from .professionals import ProfessionalListResponse, ProfessionalResponse

__all__ = [
    "AuthResponse",
    "CredentialsRequest",
    "IdentityResponse",
    "LoginRequest",
    "TokenRedeemRequest",
    "CommunityMessageCreate",
    "CommunityMessageListResponse",
    "CommunityMessageResponse",
    "WallPostCreate",
    "WallPostListResponse",
    "WallPostReactionUpdate",
    "WallPostResponse",
    "ProfessionalListResponse",
    "ProfessionalResponse",
]
