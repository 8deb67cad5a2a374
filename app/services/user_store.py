"""Lookup and uniqueness-checked insert of user accounts."""

import logging
from typing import Literal, Protocol

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import User
from app.schemas.auth import NewUserAccount, UserAccount

logger = logging.getLogger(__name__)

UniqueField = Literal["username", "email"]


class UniqueConstraintViolation(Exception):
    """Storage refused an insert because username or email is already taken."""

    def __init__(self, field: UniqueField) -> None:
        super().__init__(f"{field} already exists")
        self.field = field


class UserStore(Protocol):
    """What the account flows need from persistence. Matching is exact and case-sensitive."""

    def exists_by_username(self, username: str) -> bool: ...

    def exists_by_email(self, email: str) -> bool: ...

    def insert(self, account: NewUserAccount) -> int:
        """Persist the account and return its id. Raises UniqueConstraintViolation."""
        ...

    def find_by_username_or_email(self, identifier: str) -> UserAccount | None: ...


class SqlAlchemyUserStore:
    """UserStore backed by the users table; unique indexes are the authoritative guard."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def exists_by_username(self, username: str) -> bool:
        return (
            self.session.query(User.id).filter(User.username == username).first()
            is not None
        )

    def exists_by_email(self, email: str) -> bool:
        return self.session.query(User.id).filter(User.email == email).first() is not None

    def insert(self, account: NewUserAccount) -> int:
        user = User(
            username=account.username,
            email=account.email,
            password_hash=account.password_hash,
            role=account.role.value,
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            field = self._violated_field(account, e)
            logger.info("Insert rejected by unique constraint on %s", field)
            raise UniqueConstraintViolation(field) from e
        return user.id

    def _violated_field(self, account: NewUserAccount, error: IntegrityError) -> UniqueField:
        if self.exists_by_username(account.username):
            return "username"
        if self.exists_by_email(account.email):
            return "email"
        # The conflicting row may already be gone; fall back to the driver message.
        return "email" if "email" in str(error.orig).lower() else "username"

    def find_by_username_or_email(self, identifier: str) -> UserAccount | None:
        user = (
            self.session.query(User)
            .filter(or_(User.username == identifier, User.email == identifier))
            .order_by(User.id)
            .first()
        )
        if user is None:
            return None
        return UserAccount.model_validate(user)
