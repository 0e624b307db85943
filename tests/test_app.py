"""App factory wiring: URL layout and shared extensions."""
import pytest

from utils.security import TokenIssuer
from utils.session_manager import SessionManager


@pytest.fixture
def routes(app):
    return {(rule.rule, method) for rule in app.url_map.iter_rules() for method in rule.methods}


@pytest.mark.parametrize(
    "path,method",
    [
        ("/api/v1/health", "GET"),
        ("/api/v1/auth/register", "POST"),
        ("/api/v1/auth/login", "POST"),
        ("/api/v1/auth/refresh", "POST"),
        ("/api/v1/auth/logout", "POST"),
        ("/api/v1/users/me", "GET"),
        ("/api/v1/users/me", "PATCH"),
        ("/api/v1/users/me/password", "POST"),
        ("/api/v1/users/me/avatar", "PATCH"),
        ("/api/v1/users/me/cover-image", "PATCH"),
        ("/api/v1/users/channels/<username>", "GET"),
        ("/api/v1/users/search", "GET"),
        ("/api/v1/videos", "POST"),
        ("/api/v1/videos", "GET"),
    ],
)
def test_route_is_mounted(routes, path, method):
    assert (path, method) in routes


def test_auth_and_user_routes_are_not_mounted_at_the_root_prefix(routes):
    paths = {path for path, _ in routes}

    assert "/api/v1/login" not in paths
    assert "/api/v1/me" not in paths


def test_session_extensions_are_built_once(app):
    issuer = app.extensions["token_issuer"]
    manager = app.extensions["session_manager"]

    assert isinstance(issuer, TokenIssuer)
    assert isinstance(manager, SessionManager)
    assert manager.issuer is issuer
    assert issuer.access_secret == app.config["ACCESS_TOKEN_SECRET"]
