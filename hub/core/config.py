"""
Configuration helpers for the Volunteer Hub backend.

Settings are read from environment variables once (cached) so that storage and
services never touch os.environ directly. Tests call get_settings.cache_clear()
after monkeypatching the environment.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_dir: Path
    lock_max_attempts: int
    lock_retry_delay: float
    session_ttl_seconds: int
    log_level: str
    debug: bool


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    data_dir = (os.getenv("HUB_DATA_DIR") or "").strip()
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
        lock_max_attempts=max(1, _int(os.getenv("HUB_LOCK_MAX_ATTEMPTS", "50"), 50)),
        lock_retry_delay=max(0, _int(os.getenv("HUB_LOCK_RETRY_DELAY_MS", "100"), 100)) / 1000.0,
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "86400"), 86400),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        debug=_bool(os.getenv("HUB_DEBUG"), False),
    )
