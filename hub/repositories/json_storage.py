"""
JSON document store.

One JsonStorage instance manages one JSON file holding a mapping of collection
name to a list of records. Writes go through the schema gate, the lock marker,
a backup snapshot and an atomic temp-file replace; reads fall back to the
backup when the primary file is missing or corrupted, and put it back in place
under the lock marker.

Reads are not serialized against writers. A reader sees either the previous
or the new document, never a partially written one, because the primary file
is only ever swapped in with os.replace.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from hub.core.config import get_settings
from hub.repositories.backup import BackupManager, dump_document
from hub.repositories.errors import CollectionNotFoundError, LockTimeoutError, RecordNotFoundError
from hub.repositories.locks import FileLock
from hub.repositories.schema import validate_document

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".lock"
TMP_SUFFIX = ".tmp"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


class JsonStorage:
    """Collection store persisted as a single pretty-printed JSON document."""

    def __init__(
        self,
        path: str | os.PathLike,
        *,
        default_document: Optional[Mapping[str, Any]] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        clock: Optional[Callable[[], str]] = None,
    ) -> None:
        settings = get_settings()
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + LOCK_SUFFIX)
        self.tmp_path = self.path.with_name(self.path.name + TMP_SUFFIX)
        self.backups = BackupManager(self.path)
        self.backup_path = self.backups.backup_path
        self.default_document = dict(default_document) if default_document is not None else {"users": []}
        self.max_attempts = max_attempts if max_attempts is not None else settings.lock_max_attempts
        self.retry_delay = retry_delay if retry_delay is not None else settings.lock_retry_delay
        self._clock = clock or utc_now_iso

    def __repr__(self) -> str:
        return f"JsonStorage({str(self.path)!r})"

    # -------------------------------------- helpers --------------------------------------
    def ensure_directory(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def generate_id(self) -> str:
        return str(uuid.uuid4())

    def _empty_document(self) -> dict:
        return copy.deepcopy(self.default_document)

    def _recover_or_default(self) -> dict:
        recovered = self.backups.recover(self._restore)
        if recovered is not None:
            return recovered
        return self._empty_document()

    def _load_primary(self, *, warn: bool = True) -> Optional[dict]:
        """Parse the primary file, or None when it is missing or corrupted."""
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                document = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            if warn:
                logger.warning("Main file %s corrupted, attempting recovery: %s", self.path, exc)
            return None
        if not isinstance(document, dict):
            if warn:
                logger.warning("Main file %s does not hold a JSON object, attempting recovery", self.path)
            return None
        return document

    def _restore(self, document: dict) -> dict:
        """
        Put the backup back in place under the lock marker.

        A writer that committed after the corruption wins: its document is
        returned and left alone. When the marker is busy the repair is skipped
        and the backup is only served.
        """
        lock = FileLock(self.lock_path, max_attempts=1, retry_delay=0)
        try:
            lock.acquire()
        except LockTimeoutError:
            logger.info("Skipping repair of %s while a writer holds the lock", self.path)
            return document
        try:
            current = self._load_primary(warn=False)
            if current is not None:
                return current
            self._replace(document)
        except OSError as exc:
            logger.error("Failed to recover %s from backup: %s", self.path, exc)
            return document
        finally:
            lock.release()
        logger.info("Restored %s from %s", self.path, self.backup_path)
        return document

    # -------------------------------------- read --------------------------------------
    def read(self) -> dict:
        """Load the document, recovering from the backup when needed."""
        self.ensure_directory()
        document = self._load_primary()
        if document is None:
            return self._recover_or_default()
        return document

    # -------------------------------------- write --------------------------------------
    def write(self, document: dict) -> None:
        """Validate, lock, back up and atomically replace the document."""
        self.ensure_directory()
        validate_document(document)

        lock = FileLock(self.lock_path, max_attempts=self.max_attempts, retry_delay=self.retry_delay)
        lock.acquire()
        try:
            self.backups.snapshot()
            self._replace(document)
        finally:
            lock.release()

    def _replace(self, document: dict) -> None:
        try:
            self.tmp_path.write_text(dump_document(document), encoding="utf-8")
            os.replace(self.tmp_path, self.path)
        except BaseException:
            try:
                self.tmp_path.unlink(missing_ok=True)
            except OSError as exc:
                logger.debug("Could not remove temp file %s: %s", self.tmp_path, exc)
            raise

    # -------------------------------------- records --------------------------------------
    def add_record(self, collection: str, record: Mapping[str, Any]) -> dict:
        document = self.read()
        records = document.setdefault(collection, [])

        stored = dict(record)
        if not stored.get("id"):
            stored["id"] = self.generate_id()
        now = self._clock()
        stored["createdAt"] = now
        stored["updatedAt"] = now

        records.append(stored)
        self.write(document)
        return stored

    def update_record(self, collection: str, record_id: str, patch: Mapping[str, Any]) -> dict:
        document = self.read()
        if collection not in document:
            raise CollectionNotFoundError(collection)

        records = document[collection]
        for index, existing in enumerate(records):
            if isinstance(existing, dict) and existing.get("id") == record_id:
                break
        else:
            raise RecordNotFoundError(collection, record_id)

        updated = {**existing, **patch, "id": existing["id"], "updatedAt": self._clock()}
        records[index] = updated
        self.write(document)
        return updated

    def find_records(self, collection: str, filters: Optional[Mapping[str, Any]] = None) -> list[dict]:
        records = self.read().get(collection)
        if not records:
            return []
        if not filters:
            return records
        return [
            record
            for record in records
            if isinstance(record, dict) and all(key in record and record[key] == value for key, value in filters.items())
        ]

    def find_one(self, collection: str, filters: Mapping[str, Any]) -> Optional[dict]:
        matches = self.find_records(collection, filters)
        return matches[0] if matches else None

    def get_record(self, collection: str, record_id: str) -> dict:
        record = self.find_one(collection, {"id": record_id})
        if record is None:
            raise RecordNotFoundError(collection, record_id)
        return record

    def delete_record(self, collection: str, record_id: str) -> bool:
        document = self.read()
        if collection not in document:
            raise CollectionNotFoundError(collection)

        records = document[collection]
        remaining = [r for r in records if not (isinstance(r, dict) and r.get("id") == record_id)]
        if len(remaining) == len(records):
            raise RecordNotFoundError(collection, record_id)

        document[collection] = remaining
        self.write(document)
        return True
