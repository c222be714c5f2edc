"""
Shared fixtures: an in-memory database per test, a TestClient wired to it,
and a mailer that records what it would have sent.
"""
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_DIR", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wagehire.core.auth_dependency import get_db
from wagehire.db.base import Base
from wagehire.db.init_db import create_tables
from wagehire.main import app
from wagehire.services.email_service import EmailService, get_email_service

STRONG_PASSWORD = "Str0ng!Pass"

# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class RecordingMailer(EmailService):
    """EmailService whose transport is a list; ``deliver=False`` behaves as unconfigured."""

    def __init__(self, deliver: bool = False):
        super().__init__(api_key=None, from_email="no-reply@test.local")
        self.deliver = deliver
        self.sent = []

    @property
    def configured(self) -> bool:
        return self.deliver

    def send_email(self, to_email: str, subject: str, html_content: str) -> int:
        self.sent.append({"to": to_email, "subject": subject, "html": html_content})
        return 202


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    create_tables(test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def mailer():
    return RecordingMailer(deliver=False)


@pytest.fixture
def client(db, mailer):
    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: mailer
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class Api:
    """Small helper around the client for registering and logging in."""

    def __init__(self, client: TestClient):
        self.client = client

    def register(self, email: str, name: str = "Test User", password: str = STRONG_PASSWORD, **extra):
        body = {"email": email, "name": name, "password": password, **extra}
        return self.client.post("/api/auth/register", json=body)

    def login(self, email: str, password: str = STRONG_PASSWORD):
        return self.client.post("/api/auth/login", json={"email": email, "password": password})

    def headers_for(self, email: str, password: str = STRONG_PASSWORD) -> dict:
        response = self.login(email, password)
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    def signup(self, email: str, name: str = "Test User", **extra) -> dict:
        """Register and log in; returns headers plus the created user."""
        response = self.register(email, name=name, **extra)
        assert response.status_code == 201, response.text
        return {"headers": self.headers_for(email), "user": response.json()["user"]}

    def create_interview(self, headers: dict, **fields):
        body = {"company_name": "Acme Corp", "job_title": "Backend Engineer", "duration": 60, **fields}
        return self.client.post("/api/interviews", json=body, headers=headers)


@pytest.fixture
def api(client):
    return Api(client)


@pytest.fixture
def admin(api):
    """The first registered account, which is always the admin."""
    return api.signup("admin@example.com", name="Ada Admin")


@pytest.fixture
def candidate(api, admin):
    return api.signup("carol@example.com", name="Carol Candidate", current_position="Backend Engineer")


@pytest.fixture
def other_candidate(api, admin):
    return api.signup("dave@example.com", name="Dave Candidate")


FEEDBACK_BODY = {
    "technical_skills": 4,
    "communication_skills": 5,
    "problem_solving": 4,
    "cultural_fit": 3,
    "overall_rating": 4,
    "feedback_text": "Good technical depth, friendly panel.",
    "recommendation": "hire",
}


@pytest.fixture
def feedback_body():
    return dict(FEEDBACK_BODY)
