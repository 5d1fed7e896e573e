"""
Shared fixtures: in-memory SQLite database, API client, scripted LLM and user factories.
"""
import json
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import crosscareers.db.models  # noqa: F401
from crosscareers.core.auth_dependency import get_db
from crosscareers.core.rate_limit import rate_limit_store
from crosscareers.core.security import create_access_token, hash_password
from crosscareers.db.base import Base
from crosscareers.db.models.user import User
from crosscareers.llm.provider import LLMProvider, LLMResponse
from crosscareers.llm.runner import LLMRunner, get_llm_runner
from crosscareers.main import app
from crosscareers.services import email_service

# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

TEST_PASSWORD = "testpass123"


class FakeProvider(LLMProvider):
    """Replays scripted replies in order and records every call."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    def queue(self, *replies):
        for reply in replies:
            self.replies.append(reply if isinstance(reply, (str, Exception)) else json.dumps(reply))

    def chat(self, messages, model, temperature=0.7, max_tokens=None, **kwargs):
        self.calls.append(messages)
        if not self.replies:
            raise RuntimeError("FakeProvider has no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, tokens_in=10, tokens_out=20, model=model)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def llm():
    return FakeProvider()


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing mail instead of talking to SMTP."""
    outbox = []

    def fake_send_email(to, subject, html_body):
        outbox.append({"to": to, "subject": subject, "body": html_body})
        return True

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return outbox


@pytest.fixture
def client(db, llm, sent_emails):
    """API client bound to the test database and the scripted LLM."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_runner] = lambda: LLMRunner(provider=llm)
    rate_limit_store.clear()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        rate_limit_store.clear()


def make_user(db, email="user@example.com", role="user", verified=True, **fields) -> User:
    now = datetime.utcnow()
    values = dict(
        first_name="Test",
        last_name="User",
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
        is_verified=verified,
        referral_code=fields.pop("referral_code", email[:5].upper().replace("@", "X").ljust(5, "Z")),
        subscription_type="freeTrial",
        subscription_plan="trial",
        subscription_status="inactive",
        free_trial_expires_at=now + timedelta(days=3),
        refresh_tokens=[],
    )
    values.update(fields)
    user = User(**values)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = create_access_token({"id": user.id, "role": user.role}, expires_delta=timedelta(days=1))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(db):
    """Verified user on a running free trial."""
    return make_user(db)


@pytest.fixture
def expired_user(db):
    """Verified user whose trial has lapsed."""
    return make_user(
        db,
        email="expired@example.com",
        referral_code="EXPRD",
        free_trial_expires_at=datetime.utcnow() - timedelta(days=1),
    )


@pytest.fixture
def admin(db):
    return make_user(db, email="admin@example.com", role="admin", referral_code="ADMIN")


@pytest.fixture
def headers(user):
    return auth_headers(user)
