"""Pytest configuration and shared fixtures"""
import os
import tempfile

# Must be set before the application modules are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="portfolio-uploads-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from portfolio_api.app import app  # noqa: E402
from portfolio_api.auth.auth import create_access_token, hash_password  # noqa: E402
from portfolio_api.auth.database import AdminUser, Base, SessionLocal, User, engine, init_db  # noqa: E402
from portfolio_api.auth.routes import LOGIN_MAX_ATTEMPTS, LOGIN_WINDOW_SECONDS, get_login_rate_limiter  # noqa: E402
from portfolio_api.contact.routes import (  # noqa: E402
    MAX_REQUESTS_PER_WINDOW,
    RATE_LIMIT_WINDOW,
    get_contact_rate_limiter,
)
from portfolio_api.rate_limit_utils import InMemoryRateLimiter  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse-battery"


class FakeClock:
    """Controllable replacement for time.time"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def database():
    """Fresh tables for every test"""
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def contact_limiter(clock) -> InMemoryRateLimiter:
    return InMemoryRateLimiter(
        max_requests=MAX_REQUESTS_PER_WINDOW,
        window_seconds=RATE_LIMIT_WINDOW.total_seconds(),
        clock=clock,
    )


@pytest.fixture
def login_limiter(clock) -> InMemoryRateLimiter:
    return InMemoryRateLimiter(
        max_requests=LOGIN_MAX_ATTEMPTS,
        window_seconds=LOGIN_WINDOW_SECONDS,
        clock=clock,
    )


@pytest.fixture
def no_email_provider(monkeypatch):
    """Notification disabled unless a test configures it"""
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    monkeypatch.delenv("ADMIN_EMAIL", raising=False)


@pytest.fixture
def client(contact_limiter, login_limiter, no_email_provider):
    app.dependency_overrides[get_contact_rate_limiter] = lambda: contact_limiter
    app.dependency_overrides[get_login_rate_limiter] = lambda: login_limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_user(db_session) -> User:
    user = User(email=ADMIN_EMAIL, password_hash=hash_password(ADMIN_PASSWORD))
    db_session.add(user)
    db_session.flush()
    db_session.add(AdminUser(user_id=user.id))
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def regular_user(db_session) -> User:
    user = User(email="visitor@example.com", password_hash=hash_password("visitor-password"))
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': admin_user.id})}"}


@pytest.fixture
def user_headers(regular_user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': regular_user.id})}"}
