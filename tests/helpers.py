"""Shared test fixtures: in-memory SQLite database, fast settings, API client with overrides."""

import unittest
from collections.abc import Generator
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from pydantic import SecretStr
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_email_dispatcher
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import hash_password
from app.main import app
from app.models import Base
from app.services.credential_store import CredentialStore

TEST_SECRET = "test-secret-for-unit-tests"
FAST_ROUNDS = 4


def make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


def make_session(engine) -> Session:
    return sessionmaker(bind=engine, autoflush=False)()


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "JWT_SECRET": SecretStr(TEST_SECRET),
        "BCRYPT_ROUNDS": FAST_ROUNDS,
        "EMAIL_ENABLED": False,
    }
    values.update(overrides)
    return Settings(**values)


class ApiTestCase(unittest.TestCase):
    """TestClient against the real app with DB, settings and email dispatcher overridden."""

    def setUp(self) -> None:
        self.engine = make_engine()
        self.session = make_session(self.engine)
        self.settings = make_settings()
        self.mailer = MagicMock()

        def override_get_db() -> Generator[Session, None, None]:
            yield self.session

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_settings] = lambda: self.settings
        app.dependency_overrides[get_email_dispatcher] = lambda: self.mailer
        self.client = TestClient(app)
        self.prefix = self.settings.API_V1_PREFIX

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.session.close()
        self.engine.dispose()

    def url(self, path: str) -> str:
        return f"{self.prefix}{path}"

    def create_account(
        self,
        username: str,
        password: str = "Passw0rd",
        role: str = "user",
        verified: bool = True,
    ) -> int:
        """Insert an account directly, bypassing registration."""
        user = CredentialStore(self.session).create_account(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(password, rounds=FAST_ROUNDS),
            verification_token=None if verified else f"{username:0<64}"[:64],
            role=role,
            is_verified=verified,
        )
        return user.id

    def login(self, email: str, password: str = "Passw0rd") -> str:
        r = self.client.post(self.url("/auth/login"), json={"email": email, "password": password})
        self.assertEqual(r.status_code, 200, r.text)
        return r.json()["data"]["token"]

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}
