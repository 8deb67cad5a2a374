"""Account, claim, and request/response schemas for auth endpoints."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

USERNAME_MAX_LEN = 50
EMAIL_MAX_LEN = 100
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
# No "@": an identifier at login can then only ever match a username or an email.
USERNAME_PATTERN = r"^[A-Za-z0-9_.\-]+$"


class Role(str, Enum):
    USER = "User"
    ADMIN = "Admin"


class NewUserAccount(BaseModel):
    """Account about to be inserted; storage assigns the id."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)
    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LEN)
    password_hash: bytes = Field(..., min_length=1, repr=False)
    role: Role = Role.USER


class UserAccount(NewUserAccount):
    """Stored account as handed out by a UserStore."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int


class ClaimSet(BaseModel):
    """The fixed set of facts a token carries about its subject."""

    model_config = ConfigDict(frozen=True)

    subject_id: int
    username: str
    email: str
    role: Role
    issuer: str
    audience: str
    issued_at: datetime
    expires_at: datetime

    def to_payload(self) -> dict[str, Any]:
        """JWT payload; PyJWT converts the datetimes to NumericDate."""
        return {
            "sub": str(self.subject_id),
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": self.issued_at,
            "exp": self.expires_at,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ClaimSet":
        """Build from a verified JWT payload. Raises ValueError on bad claim values."""
        audience = payload["aud"]
        if isinstance(audience, list):
            if len(audience) != 1:
                raise ValueError("expected a single audience")
            audience = audience[0]
        return cls(
            subject_id=int(payload["sub"]),
            username=payload["username"],
            email=payload["email"],
            role=Role(payload["role"]),
            issuer=payload["iss"],
            audience=audience,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )


class RegisterRequest(BaseModel):
    """New account details. Role is not accepted here."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(
        ...,
        min_length=1,
        max_length=USERNAME_MAX_LEN,
        pattern=USERNAME_PATTERN,
        description="Username (letters, digits, '.', '_', '-')",
    )
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )

    @field_validator("username", "email", mode="before")
    @classmethod
    def strip_whitespace(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        if len(v) > EMAIL_MAX_LEN:
            raise ValueError(f"Email must be at most {EMAIL_MAX_LEN} characters")
        return v


class LoginRequest(BaseModel):
    """Credentials for login; the identifier may be a username or an email."""

    model_config = ConfigDict(populate_by_name=True)

    username_or_email: str = Field(
        ...,
        alias="usernameOrEmail",
        min_length=1,
        max_length=EMAIL_MAX_LEN,
        description="Username or email",
    )
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")

    @field_validator("username_or_email", mode="before")
    @classmethod
    def strip_whitespace(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("username_or_email")
    @classmethod
    def normalize_email_domain(cls, v: str) -> str:
        """Lowercase an email's domain, as EmailStr does when the account registers."""
        local, at, domain = v.rpartition("@")
        return f"{local}{at}{domain.lower()}" if at else v


class TokenResponse(BaseModel):
    """Signed bearer token returned after successful login."""

    token: str = Field(..., description="JWT access token")


class MessageResponse(BaseModel):
    message: str


class ProfileResponse(BaseModel):
    """Caller's identity as carried by their token."""

    message: str = "This is a protected endpoint! You are authenticated."
    user_id: int
    username: str
    email: str
    role: Role
