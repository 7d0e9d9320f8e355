"""Domain helpers for account fields (email, roles, passwords)."""
from __future__ import annotations

import re

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

ROLES = ("volunteer", "coordinator", "admin")
SELF_SERVICE_ROLES = ("volunteer", "coordinator")

USER_FIELDS = frozenset(
    {
        "id",
        "email",
        "firstName",
        "lastName",
        "role",
        "phone",
        "name",
        "createdAt",
        "updatedAt",
        "password",
        "isActive",
        "lastLogin",
        "sessions",
        "status",
    }
)

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIALS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")
COMMON_PASSWORDS = {"password", "123456789", "qwerty", "abc123", "password123"}

ROLE_HIERARCHY = {
    "admin": {"admin", "coordinator", "volunteer"},
    "coordinator": {"coordinator", "volunteer"},
    "volunteer": {"volunteer"},
}


def is_valid_email(value: str | None) -> bool:
    """Return True when value looks like user@domain.tld."""
    if not value or not isinstance(value, str):
        return False
    return bool(EMAIL_PATTERN.fullmatch(value))


def is_valid_role(value: str | None) -> bool:
    return value in ROLES


def password_errors(password: str | None) -> list[str]:
    """List every strength rule the password breaks (empty when acceptable)."""
    value = password or ""
    errors = []
    if len(value) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[A-Z]", value):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", value):
        errors.append("Password must contain at least one number")
    if not PASSWORD_SPECIALS.search(value):
        errors.append("Password must contain at least one special character")
    if value.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common and easily guessable")
    return errors


def has_role(user_role: str | None, required_role: str) -> bool:
    return required_role in ROLE_HIERARCHY.get(user_role or "", set())


def public_user(user: dict) -> dict:
    """Copy of a user record without credentials or session data."""
    return {k: v for k, v in user.items() if k not in {"password", "sessions"}}
