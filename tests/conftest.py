"""
Shared pytest fixtures for the ShuttleSlot API tests.

Each test gets a fresh app on its own SQLite file. The app context stays
pushed for the whole test, so factories and requests share one session.
"""
from datetime import date, time, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.court import Court
from models.court_availability import CourtAvailability
from models.user import User
from security.password import hash_password
from security.session import create_token

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + str(tmp_path / "test.db")

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role="player", email=None, name=None, password=DEFAULT_PASSWORD, level=None):
        counter["n"] += 1
        user = User(
            name=name or f"{role.title()} {counter['n']}",
            email=email or f"{role}{counter['n']}@example.com",
            password_hash=hash_password(password),
            role=role,
            level=level,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def auth_headers(app):
    """Issue a bearer token for a user, as the login endpoint would."""
    def _headers(user):
        with app.test_request_context():
            token = create_token(user.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_court(app):
    def _make(owner, name="Court 1", hourly_rate=200, is_active=True, hours=None):
        """``hours`` maps a weekday to an (open, close) pair of "HH:MM" strings."""
        court = Court(owner_id=owner.id, name=name, hourly_rate=hourly_rate, is_active=is_active)
        db.session.add(court)
        db.session.flush()
        for day, (open_at, close_at) in (hours or {}).items():
            db.session.add(CourtAvailability(
                court_id=court.id,
                day_of_week=day,
                open_time=time.fromisoformat(open_at),
                close_time=time.fromisoformat(close_at),
            ))
        db.session.commit()
        return court

    return _make


@pytest.fixture
def tomorrow():
    return date.today() + timedelta(days=1)


@pytest.fixture
def owner(make_user):
    return make_user("owner")


@pytest.fixture
def player(make_user):
    return make_user("player")


@pytest.fixture
def superadmin(make_user):
    return make_user("superadmin")
