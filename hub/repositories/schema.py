"""Schema gate run before every document write."""

from __future__ import annotations

from typing import Any

from hub.domain.accounts import ROLES, USER_FIELDS, is_valid_email
from hub.repositories.errors import SchemaError

ALLOWED_COLLECTIONS = (
    "users",
    "profiles",
    "workshops",
    "sessions",
    "applications",
    "messages",
    "notifications",
    "config",
)


def _validate_user(user: Any) -> None:
    if not isinstance(user, dict):
        raise SchemaError("User records must be objects")
    email = user.get("email")
    if email and not is_valid_email(email):
        raise SchemaError("Invalid email format")
    role = user.get("role")
    if role and role not in ROLES:
        raise SchemaError("Invalid role")
    unknown = [field for field in user if field not in USER_FIELDS]
    if unknown:
        raise SchemaError(f"Invalid user fields: {', '.join(unknown)}")


def validate_document(document: Any) -> bool:
    """Raise SchemaError unless document is safe to persist."""
    if not isinstance(document, dict):
        raise SchemaError("Data must be an object")

    unknown = [key for key in document if key not in ALLOWED_COLLECTIONS]
    if unknown:
        raise SchemaError(f"Unknown fields: {', '.join(str(k) for k in unknown)}")

    if "users" in document:
        users = document["users"]
        if not isinstance(users, list):
            raise SchemaError("users must be an array")
        for user in users:
            _validate_user(user)
    return True
