"""
Error taxonomy for the authentication core and the Outcome type it returns.

Core operations return an Outcome instead of raising for expected failures, so a
caller has to look at the result before it can use the value. Each error carries
the HTTP status and the caller-facing detail it maps to.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class TokenErrorKind(str, Enum):
    """Why a presented bearer token was not accepted."""

    UNAUTHENTICATED = "unauthenticated"
    MALFORMED_TOKEN = "malformed_token"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    INVALID_ISSUER = "invalid_issuer"
    INVALID_AUDIENCE = "invalid_audience"


class AuthServiceError(Exception):
    """Base class; detail is safe to show to the caller."""

    status_code: int = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(AuthServiceError):
    """Malformed request input; errors holds one entry per offending field."""

    status_code = 400

    def __init__(self, errors: list[dict[str, Any]], detail: str = "Invalid request.") -> None:
        super().__init__(detail)
        self.errors = errors


class ConflictError(AuthServiceError):
    """Duplicate username or email."""

    status_code = 400


class AuthenticationError(AuthServiceError):
    """Bad credentials at login; never says which part was wrong."""

    status_code = 401


class TokenError(AuthServiceError):
    """Missing, malformed, expired, or badly signed bearer token."""

    status_code = 401

    def __init__(self, kind: TokenErrorKind, detail: str = "Invalid or expired token") -> None:
        super().__init__(detail)
        self.kind = kind


class AuthorizationError(AuthServiceError):
    """Valid identity, insufficient role."""

    status_code = 403


class ConfigurationError(AuthServiceError):
    status_code = 500


class MisconfiguredSigningKeyError(ConfigurationError):
    def __init__(self, detail: str = "Token signing key is not configured.") -> None:
        super().__init__(detail)


class InternalError(AuthServiceError):
    status_code = 500


class PasswordHashingError(InternalError):
    def __init__(self, detail: str = "Password hashing failed.") -> None:
        super().__init__(detail)


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or an AuthServiceError, never both."""

    value: T | None = None
    error: AuthServiceError | None = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: AuthServiceError) -> "Outcome[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
