"""
Create a user with an explicit role (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user admin admin@example.org your-secure-password Admin
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.security import PasswordHasher
from app.schemas.auth import NewUserAccount, RegisterRequest, Role
from app.services.user_store import SqlAlchemyUserStore, UniqueConstraintViolation

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Create a user; the only way to grant the Admin role."
    )
    parser.add_argument("username", help="Username (1-50 chars)")
    parser.add_argument("email", help="Email address (max 100 chars)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument(
        "role", nargs="?", default=Role.USER.value, choices=[r.value for r in Role]
    )
    args = parser.parse_args(argv)

    try:
        request = RegisterRequest(
            username=args.username, email=args.email, password=args.password
        )
    except ValidationError as e:
        for err in e.errors():
            print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    hasher = PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)
    db = SessionLocal()
    try:
        store = SqlAlchemyUserStore(db)
        user_id = store.insert(
            NewUserAccount(
                username=request.username,
                email=str(request.email),
                password_hash=hasher.hash(request.password),
                role=Role(args.role),
            )
        )
    except UniqueConstraintViolation as e:
        print(f"A user with that {e.field} already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()

    logger.info("Created user '%s' (id=%s) with role '%s'", request.username, user_id, args.role)
    return 0


if __name__ == "__main__":
    sys.exit(main())
