"""
ClubHub - Test Configuration and Fixtures
"""
import pytest

from app import create_app
from extensions import db
from models.user import User
from models.club import Club

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "JWT_SECRET_KEY": "test-jwt-secret-key-for-testing-only",
    "JWT_COOKIE_SECURE": False,
    "WX_PRIVATE_KEY_PATH": None,
    "LOG_LEVEL": "WARNING",
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(email, role="Student", name=None):
        user = User(email=email, role=role, name=name or email.split("@")[0])
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def login(client):
    """POST /jwt，token cookie 会留在 test client 里"""
    def _login(email):
        resp = client.post("/jwt", json={"email": email})
        assert resp.status_code == 200
        return resp
    return _login


@pytest.fixture
def admin(make_user, login):
    user = make_user("admin@club.test", role="Admin")
    login(user.email)
    return user


@pytest.fixture
def moderator(make_user, login):
    user = make_user("mod@club.test", role="Moderator")
    login(user.email)
    return user


@pytest.fixture
def make_club(app):
    def _make(**kwargs):
        kwargs.setdefault("posted_user_email", "admin@club.test")
        club = Club(**kwargs)
        db.session.add(club)
        db.session.commit()
        return club
    return _make
