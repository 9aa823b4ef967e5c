"""Tests for registration, login and the post-registration hook."""

import pytest

from questboard.core.errors import UnauthenticatedError
from questboard.modules.auth.hooks import default_display_name, on_user_registered
from questboard.modules.auth.schemas import LoginRequest, RegisterRequest
from questboard.modules.auth.service import AuthService, clear_auth_cache


@pytest.fixture
def auth(db):
    clear_auth_cache()
    yield AuthService(db, db)
    clear_auth_cache()


def test_display_name_fallbacks():
    assert default_display_name("mira@example.com") == "mira"
    assert default_display_name("mira@example.com", {"display_name": "Mira the Bold"}) == "Mira the Bold"
    assert default_display_name(None) == "Adventurer"


def test_register_runs_hook(auth, db):
    response = auth.register(RegisterRequest(email="mira@example.com", password="hunter22", display_name="Mira"))
    profiles = db.rows("profiles")
    assert [(p["user_id"], p["display_name"]) for p in profiles] == [(response.user_id, "Mira")]
    assert [(r["user_id"], r["role"]) for r in db.rows("user_roles")] == [(response.user_id, "user")]


def test_hook_is_idempotent(db):
    on_user_registered(db, "user-1", "one@example.com")
    on_user_registered(db, "user-1", "one@example.com")
    assert len(db.rows("profiles")) == 1
    assert len(db.rows("user_roles")) == 1


def test_duplicate_registration(auth):
    auth.register(RegisterRequest(email="mira@example.com", password="hunter22"))
    with pytest.raises(Exception) as exc_info:
        auth.register(RegisterRequest(email="mira@example.com", password="hunter22"))
    assert exc_info.value.status_code == 400


def test_login_and_resolve(auth):
    registered = auth.register(RegisterRequest(email="mira@example.com", password="hunter22"))
    token = auth.login(LoginRequest(email="mira@example.com", password="hunter22"))
    assert token.user_id == registered.user_id
    assert auth.get_current_user(token.access_token)["id"] == registered.user_id


def test_login_unknown_user(auth):
    with pytest.raises(UnauthenticatedError):
        auth.login(LoginRequest(email="nobody@example.com", password="x"))


def test_invalid_token(auth):
    with pytest.raises(UnauthenticatedError):
        auth.get_current_user("not-a-token")


def test_logout_clears_cached_identity(auth, db):
    assert auth.get_current_user("user-mira")["id"] == "user-mira"
    assert auth.logout("user-mira")
