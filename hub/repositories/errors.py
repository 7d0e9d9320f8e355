"""Exceptions raised by the JSON document store."""

from __future__ import annotations


class StorageError(Exception):
    """Base class for storage engine errors."""


class SchemaError(StorageError, ValueError):
    """Document rejected by the schema gate; nothing was written."""

    def __init__(self, reason: str):
        super().__init__(f"Schema validation failed: {reason}")
        self.reason = reason


class LockTimeoutError(StorageError, TimeoutError):
    """Writer could not take the lock marker within the retry budget."""

    def __init__(self, path: str, attempts: int):
        super().__init__(f"Unable to acquire file lock on {path} after {attempts} attempts")
        self.path = path
        self.attempts = attempts


class CollectionNotFoundError(StorageError, LookupError):
    def __init__(self, collection: str):
        super().__init__(f"Collection {collection} not found")
        self.collection = collection


class RecordNotFoundError(StorageError, LookupError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f"Record with id {record_id} not found in {collection}")
        self.collection = collection
        self.record_id = record_id
