from __future__ import annotations

import json
import sys
import threading
import time
from pathlib import Path

import pytest

# Make the hub package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hub.repositories.backup import BackupManager  # noqa: E402
from hub.repositories.errors import LockTimeoutError  # noqa: E402
from hub.repositories.locks import FileLock  # noqa: E402


def test_acquire_creates_marker_and_release_removes_it(tmp_path):
    marker = tmp_path / "doc.json.lock"
    lock = FileLock(marker, max_attempts=1, retry_delay=0)

    assert lock.acquire() == str(marker)
    try:
        assert marker.exists()
        assert lock.locked
    finally:
        lock.release()

    assert not marker.exists()
    assert not lock.locked


def test_two_instances_on_one_marker_exclude_each_other(tmp_path):
    marker = tmp_path / "doc.json.lock"
    with FileLock(marker, max_attempts=1, retry_delay=0):
        with pytest.raises(LockTimeoutError):
            FileLock(marker, max_attempts=2, retry_delay=0.01).acquire()
    assert not marker.exists()


def test_release_is_idempotent(tmp_path):
    lock = FileLock(tmp_path / "doc.json.lock", max_attempts=1, retry_delay=0)
    lock.acquire()
    lock.release()
    lock.release()
    FileLock(tmp_path / "never.lock").release()


def test_existing_marker_times_out_after_bounded_attempts(tmp_path):
    marker = tmp_path / "doc.json.lock"
    marker.write_text("held by another writer")
    lock = FileLock(marker, max_attempts=3, retry_delay=0.01)

    started = time.monotonic()
    with pytest.raises(LockTimeoutError) as info:
        lock.acquire()

    assert info.value.attempts == 3
    assert time.monotonic() - started < 2
    assert marker.read_text() == "held by another writer"


def test_timed_out_lock_does_not_block_later_writers(tmp_path):
    marker = tmp_path / "doc.json.lock"
    marker.write_text("held by another writer")
    with pytest.raises(LockTimeoutError):
        FileLock(marker, max_attempts=2, retry_delay=0.01).acquire()

    marker.unlink()
    with FileLock(marker, max_attempts=2, retry_delay=0.01):
        assert marker.exists()


def test_second_thread_waits_for_release(tmp_path):
    marker = tmp_path / "doc.json.lock"
    order: list[str] = []
    first = FileLock(marker, max_attempts=50, retry_delay=0.01)
    first.acquire()

    def contender():
        with FileLock(marker, max_attempts=50, retry_delay=0.01):
            order.append("second")

    thread = threading.Thread(target=contender)
    thread.start()
    time.sleep(0.05)
    order.append("first")
    first.release()
    thread.join(timeout=5)

    assert order == ["first", "second"]
    assert not marker.exists()


def test_snapshot_skips_missing_primary(tmp_path):
    manager = BackupManager(tmp_path / "doc.json")
    assert manager.snapshot() is False
    assert not manager.backup_path.exists()


def test_snapshot_copies_primary(tmp_path):
    primary = tmp_path / "doc.json"
    primary.write_text('{"users": []}', encoding="utf-8")
    manager = BackupManager(primary)

    assert manager.snapshot() is True
    assert manager.backup_path == tmp_path / "doc.json.backup"
    assert manager.backup_path.read_text(encoding="utf-8") == '{"users": []}'


def test_recover_without_backup_returns_none(tmp_path):
    restored: list[dict] = []
    assert BackupManager(tmp_path / "doc.json").recover(restored.append) is None
    assert restored == []


def test_recover_with_unparseable_backup_returns_none(tmp_path):
    manager = BackupManager(tmp_path / "doc.json")
    manager.backup_path.write_text("{{{", encoding="utf-8")
    assert manager.recover(lambda document: document) is None
    assert not manager.path.exists()


def test_recover_hands_backup_to_restore(tmp_path):
    manager = BackupManager(tmp_path / "doc.json")
    manager.backup_path.write_text(json.dumps({"users": [{"id": "1"}]}), encoding="utf-8")
    restored: list[dict] = []

    def restore(document):
        restored.append(document)
        return {"users": [{"id": "newer"}]}

    assert manager.recover(restore) == {"users": [{"id": "newer"}]}
    assert restored == [{"users": [{"id": "1"}]}]
    assert manager.load() == {"users": [{"id": "1"}]}
