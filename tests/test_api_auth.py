"""API tests for /auth and /user routes using TestClient and an in-memory SQLite database."""

import unittest
from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import hash_password
from app.main import app
from app.models import Base
from app.schemas.auth import NewUserAccount, Role
from app.services.user_store import SqlAlchemyUserStore

PREFIX = "/api/v1"


def _test_settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET="api-test-signing-secret-0123456789abcdef",
        JWT_ISSUER="credentia-test",
        JWT_AUDIENCE="credentia-test-clients",
        JWT_EXPIRE_MINUTES=5,
        BCRYPT_ROUNDS=4,
    )


class _ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        engine = create_engine(
            "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
        Base.metadata.create_all(engine)
        self.session_factory = sessionmaker(bind=engine, autoflush=False)

        def override_get_db() -> Generator[Session, None, None]:
            db = self.session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_settings] = _test_settings
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def register(self, username: str = "alice", email: str = "a@x.com", password: str = "password1"):
        return self.client.post(
            f"{PREFIX}/auth/register",
            json={"username": username, "email": email, "password": password},
        )

    def login(self, identifier: str = "alice", password: str = "password1"):
        return self.client.post(
            f"{PREFIX}/auth/login",
            json={"usernameOrEmail": identifier, "password": password},
        )

    def bearer(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


class TestRegisterEndpoint(_ApiTestCase):
    def test_register_success(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Registration successful!"})
        self.assertNotIn("token", resp.json())

    def test_duplicate_username(self) -> None:
        self.register()
        resp = self.register(email="other@x.com")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Username already exists.")

    def test_duplicate_email(self) -> None:
        self.register()
        resp = self.register(username="bob")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Email already exists.")

    def test_invalid_fields_are_400_with_details(self) -> None:
        cases = [
            {"username": "alice", "email": "not-an-email", "password": "password1"},
            {"username": "", "email": "a@x.com", "password": "password1"},
            {"username": "a" * 51, "email": "a@x.com", "password": "password1"},
            {"username": "al@ce", "email": "a@x.com", "password": "password1"},
            {"username": "alice", "email": "a@x.com", "password": "short"},
            {"username": "alice", "email": ("e" * 95) + "@x.com", "password": "password1"},
            {"email": "a@x.com", "password": "password1"},
        ]
        for body in cases:
            with self.subTest(body=body):
                resp = self.client.post(f"{PREFIX}/auth/register", json=body)
                self.assertEqual(resp.status_code, 400)
                self.assertIsInstance(resp.json()["detail"], list)

    def test_validation_details_name_the_field(self) -> None:
        resp = self.register(email="not-an-email")
        self.assertEqual(resp.status_code, 400)
        detail = resp.json()["detail"]
        self.assertEqual(len(detail), 1)
        self.assertEqual(detail[0]["loc"], ["body", "email"])
        self.assertIn("msg", detail[0])

    def test_validation_errors_do_not_echo_password(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/register",
            json={"username": "alice", "email": "a@x.com", "password": "tiny"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertNotIn("tiny", resp.text)

    def test_role_cannot_be_chosen_at_registration(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/register",
            json={"username": "mallory", "email": "m@x.com", "password": "password1", "role": "Admin"},
        )
        self.assertEqual(resp.status_code, 400)


class TestLoginEndpoint(_ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()

    def test_login_returns_token(self) -> None:
        resp = self.login()
        self.assertEqual(resp.status_code, 200)
        token = resp.json()["token"]
        self.assertEqual(len(token.split(".")), 3)

    def test_login_with_email(self) -> None:
        self.assertEqual(self.login("a@x.com").status_code, 200)

    def test_login_with_email_exactly_as_registered(self) -> None:
        self.assertEqual(self.register("bob", "b@Mixed.X.com").status_code, 200)
        for identifier in ("b@Mixed.X.com", "b@mixed.x.com"):
            with self.subTest(identifier=identifier):
                self.assertEqual(self.login(identifier).status_code, 200)
        self.assertEqual(self.login("B@mixed.x.com").status_code, 401)

    def test_bad_credentials_are_uniform_401(self) -> None:
        for identifier, password in (("nobody", "password1"), ("alice", "wrong-password")):
            with self.subTest(identifier=identifier):
                resp = self.login(identifier, password)
                self.assertEqual(resp.status_code, 401)
                self.assertEqual(resp.json()["detail"], "Invalid credentials.")

    def test_missing_fields_are_400(self) -> None:
        resp = self.client.post(f"{PREFIX}/auth/login", json={"usernameOrEmail": "alice"})
        self.assertEqual(resp.status_code, 400)


class TestProtectedEndpoints(_ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()
        self.user_token = self.login().json()["token"]
        db = self.session_factory()
        try:
            SqlAlchemyUserStore(db).insert(
                NewUserAccount(
                    username="root",
                    email="root@x.com",
                    password_hash=hash_password("admin-password", rounds=4),
                    role=Role.ADMIN,
                )
            )
        finally:
            db.close()
        self.admin_token = self.login("root", "admin-password").json()["token"]

    def test_profile_reflects_token_claims(self) -> None:
        resp = self.client.get(f"{PREFIX}/user/profile", headers=self.bearer(self.user_token))
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["username"], "alice")
        self.assertEqual(body["email"], "a@x.com")
        self.assertEqual(body["role"], "User")
        self.assertIsInstance(body["user_id"], int)

    def test_missing_token_is_401(self) -> None:
        resp = self.client.get(f"{PREFIX}/user/profile")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.headers.get("www-authenticate"), "Bearer")

    def test_invalid_token_is_401(self) -> None:
        resp = self.client.get(f"{PREFIX}/user/profile", headers=self.bearer("garbage.token.here"))
        self.assertEqual(resp.status_code, 401)

    def test_user_role_cannot_read_admin_data(self) -> None:
        resp = self.client.get(f"{PREFIX}/user/admin-data", headers=self.bearer(self.user_token))
        self.assertEqual(resp.status_code, 403)

    def test_admin_reads_admin_data(self) -> None:
        resp = self.client.get(f"{PREFIX}/user/admin-data", headers=self.bearer(self.admin_token))
        self.assertEqual(resp.status_code, 200)
        self.assertIn("Admin root", resp.json()["message"])

    def test_user_data_requires_user_role(self) -> None:
        ok = self.client.get(f"{PREFIX}/user/user-data", headers=self.bearer(self.user_token))
        self.assertEqual(ok.status_code, 200)
        self.assertIn("User alice", ok.json()["message"])
        denied = self.client.get(f"{PREFIX}/user/user-data", headers=self.bearer(self.admin_token))
        self.assertEqual(denied.status_code, 403)

    def test_forged_admin_token_is_401_not_200(self) -> None:
        header, _, signature = self.user_token.split(".")
        _, admin_payload, _ = self.admin_token.split(".")
        forged = f"{header}.{admin_payload}.{signature}"
        resp = self.client.get(f"{PREFIX}/user/admin-data", headers=self.bearer(forged))
        self.assertEqual(resp.status_code, 401)
