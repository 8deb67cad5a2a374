"""Registration and JWT login."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_account_service, to_http_exception
from app.schemas.auth import LoginRequest, MessageResponse, RegisterRequest, TokenResponse
from app.services.accounts import AccountService

router = APIRouter()


@router.post("/register", response_model=MessageResponse)
def register(
    body: RegisterRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> MessageResponse:
    """Create an account with role User. No token is issued; log in afterwards."""
    outcome = service.register(body.username, str(body.email), body.password)
    if not outcome.ok:
        raise to_http_exception(outcome.error)
    return MessageResponse(message="Registration successful!")


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> TokenResponse:
    """
    Authenticate with username or email and password; returns a JWT.
    Include the token in the Authorization header as: Bearer <token>
    """
    outcome = service.login(body.username_or_email, body.password)
    if not outcome.ok:
        raise to_http_exception(outcome.error)
    return TokenResponse(token=outcome.unwrap())
