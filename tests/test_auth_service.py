from __future__ import annotations

import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Make the hub package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hub.repositories.layout import storage_for  # noqa: E402
from hub.services.auth_service import (  # noqa: E402
    AccountDisabledError,
    AccountExistsError,
    AuthService,
    InvalidCredentialsError,
    RegistrationError,
    SessionInvalidError,
    UserNotFoundError,
)
from hub.services.session_service import SessionService  # noqa: E402

PASSWORD = "Str0ng!Pass"


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2030, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def svc(tmp_path, clock):
    return AuthService(storage=storage_for("users", tmp_path), sessions=SessionService(ttl_seconds=3600, now=clock))


def _register(svc: AuthService, email: str = "vol@example.org", role: str = "volunteer") -> dict:
    return svc.register(email, PASSWORD, "Val", "Ontario", role)


def test_register_hides_password_and_hashes_it(svc, tmp_path):
    user = _register(svc)

    assert "password" not in user and "sessions" not in user
    assert user["role"] == "volunteer"
    assert user["isActive"] is True
    stored = json.loads((tmp_path / "users.json").read_text(encoding="utf-8"))["users"][0]
    assert stored["password"].startswith("argon2$")
    assert PASSWORD not in stored["password"]


@pytest.mark.parametrize(
    "email, password, role, message",
    [
        ("", PASSWORD, "volunteer", "All fields are required"),
        ("not-an-email", PASSWORD, "volunteer", "Invalid email format"),
        ("a@b.com", "short", "volunteer", "Password validation failed"),
        ("a@b.com", PASSWORD, "admin", "Invalid role"),
    ],
)
def test_register_validation(svc, email, password, role, message):
    with pytest.raises(RegistrationError, match=message):
        svc.register(email, password, "First", "Last", role)


def test_weak_password_lists_every_problem(svc):
    with pytest.raises(RegistrationError) as info:
        svc.register("a@b.com", "password", "First", "Last", "volunteer")
    assert "Password must contain at least one uppercase letter" in info.value.errors
    assert "Password is too common and easily guessable" in info.value.errors


def test_duplicate_email_is_rejected(svc):
    _register(svc)
    with pytest.raises(AccountExistsError):
        _register(svc)


def test_login_issues_session_and_records_last_login(svc):
    user = _register(svc)

    result = svc.login("vol@example.org", PASSWORD)

    assert result.user["id"] == user["id"]
    assert result.user["lastLogin"]
    assert "sessions" not in result.user
    verified, session_id = svc.verify_session(result.token)
    assert verified["email"] == "vol@example.org"
    assert session_id == result.session_id


def test_login_rejects_bad_credentials(svc):
    _register(svc)
    with pytest.raises(InvalidCredentialsError):
        svc.login("vol@example.org", "Wr0ng!Pass")
    with pytest.raises(InvalidCredentialsError):
        svc.login("nobody@example.org", PASSWORD)
    with pytest.raises(InvalidCredentialsError):
        svc.login("", "")


def test_login_rejects_deactivated_account(svc):
    user = _register(svc)
    svc.storage.update_record("users", user["id"], {"isActive": False})
    with pytest.raises(AccountDisabledError):
        svc.login("vol@example.org", PASSWORD)


def test_logout_invalidates_session(svc):
    user = _register(svc)
    result = svc.login("vol@example.org", PASSWORD)

    svc.logout(user["id"], result.session_id)

    with pytest.raises(SessionInvalidError):
        svc.verify_session(result.token)
    with pytest.raises(UserNotFoundError):
        svc.logout("missing", result.session_id)


def test_expired_session_is_rejected_and_cleaned(svc, clock):
    user = _register(svc)
    result = svc.login("vol@example.org", PASSWORD)

    clock.now += timedelta(hours=2)

    with pytest.raises(SessionInvalidError):
        svc.verify_session(result.token)
    assert svc.cleanup_expired_sessions() == 1
    assert svc.storage.get_record("users", user["id"])["sessions"] == []


def test_unknown_token_is_rejected(svc):
    with pytest.raises(SessionInvalidError):
        svc.verify_session("nope")
    with pytest.raises(SessionInvalidError):
        svc.verify_session("")


def test_get_user_and_roles(svc):
    user = _register(svc, role="coordinator")
    assert svc.get_user(user["id"])["email"] == "vol@example.org"
    with pytest.raises(UserNotFoundError):
        svc.get_user("missing")
    assert svc.has_role("coordinator", "volunteer")
    assert not svc.has_role("volunteer", "coordinator")
    assert svc.has_role("admin", "coordinator")
    assert not svc.has_role(None, "volunteer")
