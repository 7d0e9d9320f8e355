"""Session helpers (issue, validate, revoke and prune login sessions)."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from hub.core.config import get_settings
from hub.core.security import new_session_token


def _parse_ts(value: str | None) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


class SessionService:
    """Sessions live inside the owning user record under ``sessions``."""

    def __init__(self, ttl_seconds: int | None = None, now: Callable[[], datetime] | None = None) -> None:
        settings = get_settings()
        self.ttl_seconds = max(60, ttl_seconds if ttl_seconds is not None else settings.session_ttl_seconds)
        self._now = now or (lambda: datetime.now(timezone.utc))

    def new_session(self, session_id: str) -> dict:
        now = self._now()
        return {
            "id": session_id,
            "token": new_session_token(),
            "createdAt": _iso(now),
            "expiresAt": _iso(now + timedelta(seconds=self.ttl_seconds)),
            "isActive": True,
        }

    def is_live(self, session: dict) -> bool:
        if not session.get("isActive"):
            return False
        expires = _parse_ts(session.get("expiresAt"))
        return expires is None or expires > self._now()

    def find_by_token(self, sessions: list[dict] | None, token: str) -> Optional[dict]:
        for session in sessions or []:
            if session.get("token") == token:
                return session
        return None

    def revoke(self, sessions: list[dict] | None, session_id: str) -> list[dict]:
        stamp = _iso(self._now())
        return [
            {**s, "isActive": False, "loggedOutAt": stamp} if s.get("id") == session_id else s
            for s in (sessions or [])
        ]

    def prune(self, sessions: list[dict] | None) -> list[dict]:
        """Keep only sessions that are still active and not expired."""
        return [s for s in (sessions or []) if self.is_live(s)]
