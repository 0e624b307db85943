import os

# Pick the testing config and a private in-memory database before models are imported
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402

from api import create_app  # noqa: E402
from models import storage  # noqa: E402
from models.session_store import SessionStore  # noqa: E402
from models.user import User  # noqa: E402
from utils.security import TokenIssuer, hash_password  # noqa: E402
from utils.session_manager import SessionManager  # noqa: E402

ALICE_PASSWORD = "correct-horse"
BOB_PASSWORD = "battery-staple"


@pytest.fixture
def app():
    """Fresh app over freshly created tables."""
    storage.reload()
    app = create_app("testing")
    yield app
    storage.drop_all()


@pytest.fixture
def client(app):
    """Test client without a cookie jar: tokens travel only where a test puts them."""
    return app.test_client(use_cookies=False)


@pytest.fixture
def cookie_client(app):
    return app.test_client()


@pytest.fixture
def issuer():
    return TokenIssuer(
        access_secret="unit-access-secret-0123456789abcdef",
        access_expires=timedelta(minutes=15),
        refresh_secret="unit-refresh-secret-0123456789abcdef",
        refresh_expires=timedelta(days=10),
    )


@pytest.fixture
def manager(app, issuer):
    return SessionManager(SessionStore(storage), issuer)


def make_user(username: str, password: str, **overrides) -> str:
    """Insert a user directly and return its id."""
    fields = {
        "username": username,
        "email": f"{username}@example.com",
        "full_name": username.title(),
        "avatar": f"https://media.example.com/{username}.png",
        "password_hash": hash_password(password),
    }
    fields.update(overrides)
    user = User(**fields)
    storage.new(user)
    storage.save()
    return user.id


@pytest.fixture
def alice(app):
    return make_user("alice", ALICE_PASSWORD, full_name="Alice Liddell")


@pytest.fixture
def bob(app):
    return make_user("bob", BOB_PASSWORD, full_name="Bob Builder")


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client, password: str, username: str | None = None, email: str | None = None) -> dict:
    payload = {"password": password}
    if username:
        payload["username"] = username
    if email:
        payload["email"] = email
    resp = client.post("/api/v1/auth/login", json=payload)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]
