from datetime import datetime, timezone
import logging
from pathlib import Path

import pytest

from content_backups import BackupManager, is_slot_name, slot_name
from content_errors import BackupNotFoundError, StorageError


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "content-v2.json"
    path.write_text('{"version": "2.0.0"}\n', encoding="utf-8")
    return path


@pytest.fixture
def manager(source, tmp_path):
    return BackupManager(source, tmp_path / "backups", retention=10)


def test_slot_name_replaces_unsafe_characters():
    moment = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    assert slot_name(moment) == "content-2024-01-02T03-04-05-678000Z.json"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("content-2024-01-02T03-04-05-678000Z.json", True),
        ("content-2024-01-02T03-04-05-678Z.json", True),
        ("../content-v2.json", False),
        ("content-v2.json", False),
        ("notes.txt", False),
    ],
)
def test_is_slot_name(name, expected):
    assert is_slot_name(name) is expected


def test_snapshot_without_primary_document_returns_none(tmp_path):
    manager = BackupManager(tmp_path / "missing.json", tmp_path / "backups")

    assert manager.snapshot() is None
    assert not (tmp_path / "backups").exists()


def test_snapshot_copies_bytes_unmodified(manager, source):
    source.write_bytes('{"version": "2.0.0", "title": "甲烷"}\r\n'.encode("utf-8"))

    backup_id = manager.snapshot()

    assert backup_id is not None
    assert (manager.directory / backup_id).read_bytes() == source.read_bytes()


def test_retention_keeps_only_most_recent_slots(manager):
    created = [manager.snapshot() for _ in range(15)]

    remaining = sorted(path.name for path in manager.directory.iterdir())

    assert len(remaining) == 10
    assert remaining == sorted(created[-10:])
    assert created == sorted(created)
    assert len(set(created)) == 15


def test_slots_are_strictly_increasing_across_instances(source, tmp_path):
    first = BackupManager(source, tmp_path / "backups")
    second = BackupManager(source, tmp_path / "backups")

    names = [first.snapshot(), second.snapshot(), first.snapshot()]

    assert names[0] < names[1] < names[2]


def test_prune_ignores_unrelated_files(manager):
    manager.directory.mkdir(parents=True)
    (manager.directory / "README.txt").write_text("notas", encoding="utf-8")
    manager.retention = 2

    for _ in range(4):
        manager.snapshot()

    assert (manager.directory / "README.txt").exists()
    assert len(manager.slot_names()) == 2


def test_snapshot_failure_is_logged_and_not_raised(source, tmp_path, caplog):
    blocked = tmp_path / "backups"
    blocked.write_text("não é um diretório", encoding="utf-8")
    manager = BackupManager(source, blocked)

    with caplog.at_level(logging.ERROR, logger="content_backups"):
        assert manager.snapshot() is None

    assert "Falha ao criar backup" in caplog.text


def test_prune_failure_keeps_new_backup(manager, monkeypatch, caplog):
    manager.retention = 1
    manager.snapshot()

    def refuse(self, *args, **kwargs):
        raise PermissionError("somente leitura")

    monkeypatch.setattr(Path, "unlink", refuse)

    with caplog.at_level(logging.WARNING, logger="content_backups"):
        backup_id = manager.snapshot()

    assert backup_id is not None
    assert len(manager.slot_names()) == 2
    assert "Não foi possível excluir o backup" in caplog.text


def test_list_backups_newest_first(manager, source):
    first = manager.snapshot()
    source.write_text('{"version": "2.0.0", "data": {}}\n', encoding="utf-8")
    second = manager.snapshot()

    backups = manager.list_backups()

    assert [backup.id for backup in backups] == [second, first]
    assert backups[0].size == source.stat().st_size
    assert backups[0].created.endswith("Z")
    assert backups[0].to_dict()["id"] == second


def test_load_backup_returns_json(manager):
    backup_id = manager.snapshot()
    assert manager.load_backup(backup_id) == {"version": "2.0.0"}


@pytest.mark.parametrize(
    "backup_id",
    ["content-2020-01-01T00-00-00-000000Z.json", "../content-v2.json", "content-v2.json"],
)
def test_load_unknown_backup_raises(manager, backup_id):
    with pytest.raises(BackupNotFoundError):
        manager.load_backup(backup_id)


def test_load_corrupt_backup_raises_storage_error(manager):
    manager.directory.mkdir(parents=True)
    name = "content-2020-01-01T00-00-00-000000Z.json"
    (manager.directory / name).write_text("{quebrado", encoding="utf-8")

    with pytest.raises(StorageError):
        manager.load_backup(name)
