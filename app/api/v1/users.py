"""Protected endpoints: the caller's own profile and role-gated data."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_current_claims, require_role
from app.schemas.auth import ClaimSet, MessageResponse, ProfileResponse, Role

router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    claims: Annotated[ClaimSet, Depends(get_current_claims)],
) -> ProfileResponse:
    """Return the identity carried by the caller's token (no database lookup)."""
    return ProfileResponse(
        user_id=claims.subject_id,
        username=claims.username,
        email=claims.email,
        role=claims.role,
    )


@router.get("/admin-data", response_model=MessageResponse)
def get_admin_data(
    claims: Annotated[ClaimSet, Depends(require_role(Role.ADMIN))],
) -> MessageResponse:
    return MessageResponse(
        message=f"Hello, Admin {claims.username}! This data is only accessible to users with the 'Admin' role."
    )


@router.get("/user-data", response_model=MessageResponse)
def get_user_data(
    claims: Annotated[ClaimSet, Depends(require_role(Role.USER))],
) -> MessageResponse:
    return MessageResponse(
        message=f"Hello, User {claims.username}! This data is accessible to general users."
    )
