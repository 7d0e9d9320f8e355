"""Logging setup shared by the CLI scripts."""

from __future__ import annotations

import logging

from .config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the root logger (idempotent)."""
    settings = get_settings()
    name = (level or settings.log_level or "INFO").upper()
    if settings.debug:
        name = "DEBUG"
    logging.basicConfig(level=getattr(logging, name, logging.INFO), format=LOG_FORMAT)
