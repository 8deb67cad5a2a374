"""Registration and login flows composed from the store, hasher, and token issuer."""

import logging

from app.core.errors import AuthenticationError, ConflictError, Outcome
from app.core.security import PasswordHasher
from app.core.tokens import TokenConfig, issue_token
from app.schemas.auth import NewUserAccount, Role, UserAccount
from app.services.user_store import UniqueConstraintViolation, UserStore

logger = logging.getLogger(__name__)

USERNAME_EXISTS = "Username already exists."
EMAIL_EXISTS = "Email already exists."
INVALID_CREDENTIALS = "Invalid credentials."

_CONFLICT_MESSAGES = {"username": USERNAME_EXISTS, "email": EMAIL_EXISTS}


class AccountService:
    """Register accounts and log them in. One instance per request is fine."""

    def __init__(self, store: UserStore, hasher: PasswordHasher, token_config: TokenConfig) -> None:
        self.store = store
        self.hasher = hasher
        self.token_config = token_config

    def register(self, username: str, email: str, password: str) -> Outcome[UserAccount]:
        """
        Create an account with role User. Input shape is validated before this point.

        The exists checks only give a nicer early answer; the storage unique
        constraint decides, and its violation maps to the same messages.
        """
        if self.store.exists_by_username(username):
            return Outcome.failure(ConflictError(USERNAME_EXISTS))
        if self.store.exists_by_email(email):
            return Outcome.failure(ConflictError(EMAIL_EXISTS))

        new_account = NewUserAccount(
            username=username,
            email=email,
            password_hash=self.hasher.hash(password),
            role=Role.USER,
        )
        try:
            user_id = self.store.insert(new_account)
        except UniqueConstraintViolation as e:
            return Outcome.failure(ConflictError(_CONFLICT_MESSAGES[e.field]))

        logger.info("Registered user %s (id=%s)", username, user_id)
        return Outcome.success(UserAccount(id=user_id, **new_account.model_dump()))

    def login(self, username_or_email: str, password: str) -> Outcome[str]:
        """Return a signed token, or one undifferentiated failure for any bad credential."""
        account = self.store.find_by_username_or_email(username_or_email)
        if account is None:
            self.hasher.dummy_verify(password)
            logger.info("Login failed: unknown identifier")
            return Outcome.failure(AuthenticationError(INVALID_CREDENTIALS))
        if not self.hasher.verify(password, account.password_hash):
            logger.info("Login failed: bad password for user id=%s", account.id)
            return Outcome.failure(AuthenticationError(INVALID_CREDENTIALS))

        issued = issue_token(account, self.token_config)
        if issued.ok:
            logger.info("Login: %s (id=%s)", account.username, account.id)
        return issued
