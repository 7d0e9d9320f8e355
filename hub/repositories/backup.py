"""Backup snapshot of a JSON document, used as the corruption recovery source."""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


def dump_document(document: Any) -> str:
    return json.dumps(document, ensure_ascii=False, indent=2)


class BackupManager:
    """Keeps ``<document>.backup`` one accepted write behind the primary file."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)
        self.backup_path = self.path.with_name(self.path.name + BACKUP_SUFFIX)

    def snapshot(self) -> bool:
        """Copy the primary file over the backup. Failures are logged, never raised."""
        try:
            if not self.path.exists():
                return False
            shutil.copyfile(self.path, self.backup_path)
            return True
        except OSError as exc:
            logger.warning("Failed to create backup of %s: %s", self.path, exc)
            return False

    def load(self) -> Optional[dict]:
        """Parse the backup, or None when it is missing or unusable."""
        try:
            if not self.backup_path.exists():
                return None
            with self.backup_path.open("r", encoding="utf-8") as fh:
                document = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.error("Failed to recover %s from backup: %s", self.path, exc)
            return None
        if not isinstance(document, dict):
            logger.error("Backup %s does not hold a JSON object", self.backup_path)
            return None
        return document

    def recover(self, restore: Callable[[dict], dict]) -> Optional[dict]:
        """
        Load the backup and hand it to ``restore`` to rewrite the primary file.

        ``restore`` returns the document now in place, which is the backup
        unless a newer write reached the primary first. Returns None when there
        is no usable backup.
        """
        document = self.load()
        if document is None:
            return None
        return restore(document)
