"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models.ledger import Expense, Income  # noqa: F401
from app.models.seed import seed_default_categories
from app.models.user import RememberedLogin, User  # noqa: F401
from app.services.account import AccountService
from app.services.mail import Mailer


class RecordingMailer(Mailer):
    """Mailer that keeps sent messages in memory."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: list[dict] = []

    def send(self, to: str, subject: str, text: str, html: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})
        return True


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database with the default categories seeded."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    seed_default_categories(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="mailer")
def mailer_fixture():
    """Replace the shared mailer with one that records messages."""
    from app.services import mail as mail_module

    recorder = RecordingMailer()
    previous = mail_module._mailer
    mail_module._mailer = recorder
    yield recorder
    mail_module._mailer = previous


@pytest.fixture(name="accounts")
def accounts_fixture(db_session: Session, mailer: RecordingMailer) -> AccountService:
    return AccountService(db_session, mailer=mailer)


@pytest.fixture(name="client")
def client_fixture(db_session: Session, mailer: RecordingMailer):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(accounts: AccountService):
    """Create an activated user and return its details plus a session token."""
    from app.services.jwt import get_jwt_service

    result = accounts.save("Test User", "test@example.com", "password123")
    assert result.success, result.errors
    accounts.activate(result.token)
    user = accounts.find_by_id(result.user.id)

    return {
        "user_id": user.id,
        "email": user.email,
        "name": user.name,
        "password": "password123",
        "token": get_jwt_service().create_token(user),
    }
