"""
Shared fixtures for the step-up login test suite.

Every test gets a fresh application on an in-memory SQLite database, a frozen
clock wired into the challenge manager, and a Flask-Mail outbox so the
e-mailed codes can be read back.

Example usage:
    def test_something(client, user, outbox):
        client.post("/auth/login", json={...})
        code = read_code(outbox[-1])
"""
import re
from datetime import datetime, timedelta

import pytest

from stepup_auth import create_app
from stepup_auth.config import Config
from stepup_auth.extensions import db, mail
from stepup_auth.models import User

PASSWORD = "CorrectHorse42"


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret-key-that-is-long-enough"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    OTP_HASH_METHOD = "pbkdf2:sha256:1000"
    MAIL_DEFAULT_SENDER = "no-reply@example.com"
    MAIL_SUPPRESS_SEND = True
    CHALLENGE_STORE = "sql"
    OTP_RESEND_COOLDOWN_SECONDS = 0


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 3, 1, 9, 30, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingGateway:
    """Delivery gateway double that keeps every code it was asked to send."""

    def __init__(self):
        self.sent = []

    def deliver(self, user_id, code, expires_at, issued_at):
        self.sent.append((user_id, code, expires_at))

    @property
    def last_code(self):
        return self.sent[-1][1]


def read_code(message) -> str:
    match = re.search(r"Your OTP code is: (\d+)", message.body)
    assert match, "no OTP in e-mail body"
    return match.group(1)


def other_code(code: str) -> str:
    return "000000" if code != "000000" else "111111"


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def clock(app):
    frozen = FrozenClock()
    app.extensions["challenge_manager"].clock = frozen
    return frozen


@pytest.fixture
def client(app, clock):
    return app.test_client()


@pytest.fixture
def outbox(app):
    with mail.record_messages() as messages:
        yield messages


@pytest.fixture
def make_user(app):
    def _make(email="ada@example.com", password=PASSWORD, role="user", is_active=True,
              full_name="Ada Lovelace", company_name="Analytical Engines Ltd"):
        user = User(
            email=email,
            role=role,
            is_active=is_active,
            full_name=full_name,
            company_name=company_name,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def user(make_user):
    return make_user()
