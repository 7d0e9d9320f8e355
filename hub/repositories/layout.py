"""Catalogue of the JSON files managed under the data directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from hub.core.config import get_settings
from hub.repositories.json_storage import JsonStorage

logger = logging.getLogger(__name__)

COLLECTION_FILES = {
    "users": "users.json",
    "profiles": "volunteer-profiles.json",
    "workshops": "workshops.json",
    "sessions": "workshop-sessions.json",
    "applications": "applications.json",
    "messages": "messages.json",
    "notifications": "notifications.json",
}


def data_dir_or_default(data_dir: Optional[str | Path] = None) -> Path:
    return Path(data_dir) if data_dir else get_settings().data_dir


def storage_for(collection: str, data_dir: Optional[str | Path] = None) -> JsonStorage:
    """Build the store for one collection file with an empty-collection default."""
    try:
        filename = COLLECTION_FILES[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}") from None
    return JsonStorage(data_dir_or_default(data_dir) / filename, default_document={collection: []})


def initialize_storage(data_dir: Optional[str | Path] = None) -> list[tuple[str, bool]]:
    """
    Create every missing collection file with its empty structure.

    Returns (filename, created) pairs; existing files are only read back so a
    corrupted one is repaired from its backup.
    """
    root = data_dir_or_default(data_dir)
    root.mkdir(parents=True, exist_ok=True)
    results = []
    for collection, filename in COLLECTION_FILES.items():
        storage = storage_for(collection, root)
        if storage.path.exists():
            storage.read()
            logger.info("Validated %s", filename)
            results.append((filename, False))
        else:
            storage.write({collection: []})
            logger.info("Created %s", filename)
            results.append((filename, True))
    return results
