from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# Make the hub package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hub.core import config as core_config  # noqa: E402
from hub.repositories.layout import COLLECTION_FILES, initialize_storage, storage_for  # noqa: E402


@pytest.fixture()
def data_env(tmp_path, monkeypatch):
    """Point HUB_DATA_DIR at a temporary directory and reset cached settings."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("HUB_DATA_DIR", str(data_dir))
    monkeypatch.setenv("HUB_LOCK_MAX_ATTEMPTS", "7")
    monkeypatch.setenv("HUB_LOCK_RETRY_DELAY_MS", "20")
    core_config.get_settings.cache_clear()
    yield data_dir
    core_config.get_settings.cache_clear()


def test_settings_are_read_from_environment(data_env):
    settings = core_config.get_settings()
    assert settings.data_dir == data_env
    assert settings.lock_max_attempts == 7
    assert settings.lock_retry_delay == pytest.approx(0.02)

    storage = storage_for("workshops")
    assert storage.path == data_env / "workshops.json"
    assert storage.max_attempts == 7
    assert storage.read() == {"workshops": []}


def test_storage_for_unknown_collection():
    with pytest.raises(ValueError):
        storage_for("cards")


def test_initialize_creates_then_validates(data_env):
    created = initialize_storage()
    assert sorted(created) == sorted((name, True) for name in COLLECTION_FILES.values())
    assert json.loads((data_env / "volunteer-profiles.json").read_text(encoding="utf-8")) == {"profiles": []}

    second = initialize_storage()
    assert all(flag is False for _, flag in second)


def test_initialize_repairs_corrupted_file_from_backup(data_env):
    initialize_storage()
    users = storage_for("users")
    users.add_record("users", {"email": "a@b.com"})
    (data_env / "users.json").write_text("garbage", encoding="utf-8")

    initialize_storage()

    assert json.loads((data_env / "users.json").read_text(encoding="utf-8")) == {"users": []}


def test_cli_main(tmp_path, capsys):
    sys.path.insert(0, str(ROOT / "scripts"))
    try:
        import init_storage
    finally:
        sys.path.remove(str(ROOT / "scripts"))

    init_storage.main(["--data-dir", str(tmp_path / "cli")])

    out = capsys.readouterr().out
    assert "Created users.json" in out
    assert "OK: storage initialized" in out
    assert (tmp_path / "cli" / "notifications.json").exists()
