"""JWT issuance and authorization for authenticated accounts."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import jwt

from app.core.errors import (
    AuthorizationError,
    MisconfiguredSigningKeyError,
    Outcome,
    TokenError,
    TokenErrorKind,
)
from app.schemas.auth import ClaimSet, Role, UserAccount

logger = logging.getLogger(__name__)

# Keyed-hash algorithms only; a verifier never accepts anything outside this list.
SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")

REQUIRED_CLAIMS = ["sub", "username", "email", "role", "iss", "aud", "iat", "exp"]


@dataclass(frozen=True)
class TokenConfig:
    """Signing secret plus issuer/audience/lifetime, built once at startup."""

    secret: str = field(repr=False)
    issuer: str
    audience: str
    lifetime_minutes: int
    algorithm: str = "HS256"
    leeway_seconds: int = 0

    def __post_init__(self) -> None:
        if self.algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported signing algorithm: {self.algorithm}")
        if self.lifetime_minutes < 0:
            raise ValueError("lifetime_minutes must not be negative")
        if self.leeway_seconds < 0:
            raise ValueError("leeway_seconds must not be negative")

    @property
    def has_secret(self) -> bool:
        return bool(self.secret and self.secret.strip())


def issue_token(
    account: UserAccount,
    config: TokenConfig,
    *,
    now: datetime | None = None,
) -> Outcome[str]:
    """
    Sign a token carrying the account's id, username, email and role as they are now.
    Fails with MisconfiguredSigningKeyError rather than signing with an empty key.
    """
    if not config.has_secret:
        logger.error("Refusing to issue token: signing secret is not configured")
        return Outcome.failure(MisconfiguredSigningKeyError())

    issued_at = now if now is not None else datetime.now(UTC)
    claims = ClaimSet(
        subject_id=account.id,
        username=account.username,
        email=account.email,
        role=account.role,
        issuer=config.issuer,
        audience=config.audience,
        issued_at=issued_at,
        expires_at=issued_at + timedelta(minutes=config.lifetime_minutes),
    )
    token = jwt.encode(claims.to_payload(), config.secret, algorithm=config.algorithm)
    return Outcome.success(token)


def _rejected(kind: TokenErrorKind) -> Outcome[ClaimSet]:
    logger.info("Bearer token rejected: %s", kind.value)
    return Outcome.failure(TokenError(kind))


def authorize_token(
    token: str | None,
    config: TokenConfig,
    required_role: Role | None = None,
) -> Outcome[ClaimSet]:
    """
    Verify signature, expiry, issuer and audience of a bearer token and return its claims.

    The signature is checked before any claim is read, so an edited payload always
    comes back as INVALID_SIGNATURE. A role mismatch is an AuthorizationError
    (403), not a TokenError (401).
    """
    if not token:
        return Outcome.failure(TokenError(TokenErrorKind.UNAUTHENTICATED, "Not authenticated"))
    if not config.has_secret:
        logger.error("Cannot verify token: signing secret is not configured")
        return Outcome.failure(MisconfiguredSigningKeyError())

    try:
        payload = jwt.decode(
            token,
            config.secret,
            algorithms=[config.algorithm],
            audience=config.audience,
            issuer=config.issuer,
            leeway=config.leeway_seconds,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        return _rejected(TokenErrorKind.EXPIRED)
    except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError):
        return _rejected(TokenErrorKind.INVALID_SIGNATURE)
    except jwt.InvalidAudienceError:
        return _rejected(TokenErrorKind.INVALID_AUDIENCE)
    except jwt.InvalidIssuerError:
        return _rejected(TokenErrorKind.INVALID_ISSUER)
    except jwt.PyJWTError:
        return _rejected(TokenErrorKind.MALFORMED_TOKEN)

    try:
        claims = ClaimSet.from_payload(payload)
    except (KeyError, TypeError, ValueError):
        return _rejected(TokenErrorKind.MALFORMED_TOKEN)

    if required_role is not None and claims.role != required_role:
        logger.info(
            "User %s with role %s denied; %s required",
            claims.subject_id,
            claims.role.value,
            required_role.value,
        )
        return Outcome.failure(AuthorizationError(f"{required_role.value} role required"))
    return Outcome.success(claims)
