"""
Shared fixtures. Required settings are set before any wifidash module is
imported so that wifidash.core.config.settings can be built without a .env.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-wifidash-tests")
os.environ.setdefault("SMTP_HOST", "")
os.environ.setdefault("FRONTEND_URL", "https://dash.example.com")

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tests.fakes import (  # noqa: E402
    FakeMailer,
    FakeNotificationRepository,
    FakePaymentRepository,
    FakeStorage,
    FakeUserRepository,
    make_user,
)
from wifidash.db.base import Base  # noqa: E402
import wifidash.models.notification  # noqa: E402,F401
import wifidash.models.payment  # noqa: E402,F401
import wifidash.models.user  # noqa: E402,F401
from wifidash.payments.models import UserRole  # noqa: E402

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def admin():
    return make_user("admin-1", "admin@example.com", role=UserRole.ADMIN, first_name="Ada")


@pytest.fixture
def customer():
    return make_user("user-1", "jane@example.com", first_name="Jane", last_name="Doe")


@pytest.fixture
def users(admin, customer):
    return FakeUserRepository([admin, customer])


@pytest.fixture
def payments():
    return FakePaymentRepository()


@pytest.fixture
def notifications():
    return FakeNotificationRepository()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def db_session():
    """Real SQLAlchemy session on a private in-memory SQLite database."""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
