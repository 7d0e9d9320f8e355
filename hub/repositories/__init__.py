"""
Persistence adapters.

Everything is stored as flat JSON documents managed by JsonStorage. Services
should depend on these stores rather than touching the JSON files.
"""

from hub.repositories.errors import (
    CollectionNotFoundError,
    LockTimeoutError,
    RecordNotFoundError,
    SchemaError,
    StorageError,
)
from hub.repositories.json_storage import JsonStorage

__all__ = [
    "CollectionNotFoundError",
    "JsonStorage",
    "LockTimeoutError",
    "RecordNotFoundError",
    "SchemaError",
    "StorageError",
]
