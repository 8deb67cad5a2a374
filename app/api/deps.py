"""Shared FastAPI dependencies: services, bearer-token claims, role guards."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.errors import AuthServiceError, TokenError
from app.core.security import PasswordHasher
from app.core.tokens import TokenConfig, authorize_token
from app.schemas.auth import ClaimSet, Role
from app.services.accounts import AccountService
from app.services.user_store import SqlAlchemyUserStore

security = HTTPBearer(auto_error=False)


def to_http_exception(error: AuthServiceError) -> HTTPException:
    """Translate a core error into the response the caller sees."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(error, TokenError) else None
    return HTTPException(status_code=error.status_code, detail=error.detail, headers=headers)


def get_token_config(settings: Annotated[Settings, Depends(get_settings)]) -> TokenConfig:
    return settings.token_config()


def get_password_hasher(settings: Annotated[Settings, Depends(get_settings)]) -> PasswordHasher:
    return PasswordHasher(rounds=settings.BCRYPT_ROUNDS)


def get_account_service(
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    token_config: Annotated[TokenConfig, Depends(get_token_config)],
) -> AccountService:
    return AccountService(SqlAlchemyUserStore(db), hasher, token_config)


def _authorize(
    credentials: HTTPAuthorizationCredentials | None,
    token_config: TokenConfig,
    required_role: Role | None,
) -> ClaimSet:
    token = credentials.credentials if credentials is not None else None
    outcome = authorize_token(token, token_config, required_role)
    if not outcome.ok:
        raise to_http_exception(outcome.error)
    return outcome.unwrap()


def get_current_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token_config: Annotated[TokenConfig, Depends(get_token_config)],
) -> ClaimSet:
    """Dependency: require a valid Bearer JWT. Raises 401 if missing or invalid."""
    return _authorize(credentials, token_config, None)


def require_role(role: Role) -> Callable[..., ClaimSet]:
    """Dependency factory: valid Bearer JWT whose role claim is exactly `role`, else 401/403."""

    def dependency(
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
        token_config: Annotated[TokenConfig, Depends(get_token_config)],
    ) -> ClaimSet:
        return _authorize(credentials, token_config, role)

    return dependency
