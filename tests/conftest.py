"""Pytest configuration and fixtures."""

import os
import re
from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from yang.api.dependencies import get_inquiry_service
from yang.config import get_settings
from yang.database import Base, configure_sqlite, get_db
from yang.exceptions import MailDeliveryError
from yang.main import app
from yang.services.inquiry_service import InquiryService
from yang.services.mailer import get_mailer


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id, email and password."""

    def __init__(
        self,
        *args,
        user_id: int | None = None,
        email: str | None = None,
        password: str | None = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email
        self.password = password


@dataclass
class SentMail:
    to: str
    subject: str
    html: str


class FakeMailer:
    """Records outgoing mail instead of talking to SMTP."""

    is_configured = True

    def __init__(self):
        self.sent: list[SentMail] = []
        self.fail = False

    def send(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise MailDeliveryError()
        self.sent.append(SentMail(to=to, subject=subject, html=html))

    @property
    def last(self) -> SentMail:
        return self.sent[-1]

    def last_reset_token(self) -> str:
        match = re.search(r"/reset-password/([0-9a-f]{64})", self.last.html)
        assert match, "no reset link in the last mail"
        return match.group(1)

    def last_code(self) -> str:
        match = re.search(r">(\d{6})<", self.last.html)
        assert match, "no verification code in the last mail"
        return match.group(1)


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/yang", "/yang_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

if "sqlite" in SQLALCHEMY_DATABASE_URL:
    configure_sqlite(engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "inquiries"


@pytest.fixture(scope="function")
def client(db, mailer, upload_dir):
    """Create a test client with database, mailer and upload directory overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    settings = get_settings().model_copy(update={"inquiry_upload_dir": str(upload_dir)})

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_inquiry_service] = lambda: InquiryService(db, settings)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def signup_user(
    client,
    email: str = "test@example.com",
    username: str = "tester",
    password: str = "testpass123",
) -> AuthHeaders:
    """Sign a user up and return bearer headers for them.

    The session cookie set by signup is dropped so that requests made with
    these headers act as this user.
    """
    response = client.post(
        "/auth/signup",
        json={
            "email": email,
            "username": username,
            "password": password,
            "confirmPassword": password,
        },
    )
    assert response.status_code == 200, response.text
    data = response.json()
    client.cookies.clear()
    return AuthHeaders(
        {"Authorization": f"Bearer {data['accessToken']}"},
        user_id=data["user"]["id"],
        email=email,
        password=password,
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return signup_user(client)


@pytest.fixture
def other_headers(client):
    """A second, unrelated user."""
    return signup_user(client, email="other@example.com", username="other", password="otherpass1")


@pytest.fixture
def signup(client):
    """Factory fixture: sign up additional users inside a test."""

    def _signup(**kwargs) -> AuthHeaders:
        return signup_user(client, **kwargs)

    return _signup


@pytest.fixture
def session_factory():
    """Open extra sessions to act as concurrent requests."""
    return TestingSessionLocal
