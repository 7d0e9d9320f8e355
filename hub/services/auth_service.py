"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from hub.core.security import hash_password, verify_password
from hub.domain.accounts import SELF_SERVICE_ROLES, has_role, is_valid_email, password_errors, public_user
from hub.repositories.errors import RecordNotFoundError
from hub.repositories.json_storage import JsonStorage
from hub.repositories.layout import storage_for
from hub.services.session_service import SessionService

logger = logging.getLogger(__name__)

USERS = "users"


class AuthError(Exception):
    """Base class for authentication-related exceptions."""


class RegistrationError(AuthError):
    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class AccountDisabledError(AuthError):
    pass


class SessionInvalidError(AuthError):
    pass


class UserNotFoundError(AuthError):
    pass


@dataclass
class LoginSuccess:
    user: dict
    token: str
    session_id: str


@dataclass
class AuthService:
    """Handles registration, login, session verification and logout."""

    storage: JsonStorage = field(default_factory=lambda: storage_for(USERS))
    sessions: SessionService = field(default_factory=SessionService)

    # -------------------------------------- helpers --------------------------------------
    def _find_by_email(self, email: str) -> Optional[dict]:
        return self.storage.find_one(USERS, {"email": email})

    def _find_by_id(self, user_id: str) -> Optional[dict]:
        return self.storage.find_one(USERS, {"id": user_id})

    def user_exists(self, email: str) -> bool:
        return self._find_by_email(email) is not None

    def has_role(self, user_role: str | None, required_role: str) -> bool:
        return has_role(user_role, required_role)

    # -------------------------------------- registration --------------------------------------
    def register(self, email: str, password: str, first_name: str, last_name: str, role: str) -> dict:
        raw_email = (email or "").strip()
        if not all([raw_email, password, (first_name or "").strip(), (last_name or "").strip(), role]):
            raise RegistrationError("All fields are required: email, password, firstName, lastName, role")
        if not is_valid_email(raw_email):
            raise RegistrationError("Invalid email format")
        problems = password_errors(password)
        if problems:
            raise RegistrationError(f"Password validation failed: {', '.join(problems)}", problems)
        if role not in SELF_SERVICE_ROLES:
            raise RegistrationError('Invalid role. Must be either "volunteer" or "coordinator"')
        if self.user_exists(raw_email):
            raise AccountExistsError("User with this email already exists")

        saved = self.storage.add_record(
            USERS,
            {
                "email": raw_email,
                "password": hash_password(password),
                "firstName": first_name.strip(),
                "lastName": last_name.strip(),
                "role": role,
                "isActive": True,
                "lastLogin": None,
                "sessions": [],
            },
        )
        logger.info("Registered %s user %s", role, saved["id"])
        return public_user(saved)

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str) -> LoginSuccess:
        raw_email = (email or "").strip()
        if not raw_email or not password:
            raise InvalidCredentialsError("Email and password are required")
        user = self._find_by_email(raw_email)
        if not user:
            raise InvalidCredentialsError("Invalid credentials")
        if not user.get("isActive"):
            raise AccountDisabledError("Account is deactivated")
        if not verify_password(password, user.get("password")):
            raise InvalidCredentialsError("Invalid credentials")

        session = self.sessions.new_session(self.storage.generate_id())
        updated = self.storage.update_record(
            USERS,
            user["id"],
            {
                "lastLogin": session["createdAt"],
                "sessions": [*(user.get("sessions") or []), session],
            },
        )
        return LoginSuccess(user=public_user(updated), token=session["token"], session_id=session["id"])

    # -------------------------------------- sessions --------------------------------------
    def verify_session(self, token: str) -> tuple[dict, str]:
        """Return (user, session_id) for a live session token."""
        token_value = (token or "").strip()
        if not token_value:
            raise SessionInvalidError("Invalid token")
        for user in self.storage.find_records(USERS):
            session = self.sessions.find_by_token(user.get("sessions"), token_value)
            if session is None:
                continue
            if not user.get("isActive"):
                raise AccountDisabledError("Account is deactivated")
            if not self.sessions.is_live(session):
                raise SessionInvalidError("Session is invalid or expired")
            return public_user(user), session["id"]
        raise SessionInvalidError("Invalid token")

    def logout(self, user_id: str, session_id: str) -> None:
        user = self._find_by_id(user_id)
        if not user:
            raise UserNotFoundError("User not found")
        self.storage.update_record(USERS, user_id, {"sessions": self.sessions.revoke(user.get("sessions"), session_id)})

    def get_user(self, user_id: str) -> dict:
        try:
            return public_user(self.storage.get_record(USERS, user_id))
        except RecordNotFoundError:
            raise UserNotFoundError("User not found") from None

    def cleanup_expired_sessions(self) -> int:
        """Drop inactive or expired sessions from every user. Returns users touched."""
        touched = 0
        for user in self.storage.find_records(USERS):
            current = user.get("sessions") or []
            kept = self.sessions.prune(current)
            if len(kept) != len(current):
                self.storage.update_record(USERS, user["id"], {"sessions": kept})
                touched += 1
        return touched
