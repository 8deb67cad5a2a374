"""Pydantic request/response schemas."""

from app.schemas.auth import (
    ClaimSet,
    LoginRequest,
    MessageResponse,
    NewUserAccount,
    ProfileResponse,
    RegisterRequest,
    Role,
    TokenResponse,
    UserAccount,
)
from app.schemas.health import HealthResponse

__all__ = [
    "ClaimSet",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "NewUserAccount",
    "ProfileResponse",
    "RegisterRequest",
    "Role",
    "TokenResponse",
    "UserAccount",
]
