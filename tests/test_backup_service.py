# SPDX-License-Identifier: MIT

import json
from pathlib import Path

import pendulum
import pytest

from stronghabit import configuration
from stronghabit.adapter.file_storage import FileStorage
from stronghabit.adapter.key_value import MemoryKeyValueStore
from stronghabit.errors import (
    BackupFileNotFoundError,
    InvalidFormatError,
    NoDataError,
    SharingUnavailableError,
    ValidationError,
)
from stronghabit.repository.habit import HabitRepository
from stronghabit.service.backup import (
    BackupService,
    backup_type,
    build_backup_file_name,
    is_due,
    sanitize_label,
)

from conftest import FROZEN_NOW, Clock, FixedFilePicker, RecordingSharer


def add_two_habits(habits: HabitRepository) -> None:
    read = habits.add_habit({"name": "Read", "frequency": "daily"})
    habits.add_habit({"name": "Run", "frequency": "weekly", "selected_days": ["monday"]})
    habits.update_habit_completion(read["id"], "2024-03-09", True)
    habits.update_habit_completion(read["id"], "2024-03-10", True)


def enable_auto_backup(backups: BackupService, retention: int = 5) -> None:
    backups.set_auto_backup_config(
        {
            "enabled": True,
            "frequency": "daily",
            "retention": retention,
            "last_backup_date": None,
        }
    )


def test_file_names_embed_sanitized_label_and_timestamp() -> None:
    assert sanitize_label("My Report!") == "My-Report"
    assert (
        build_backup_file_name(None, FROZEN_NOW)
        == "stronghabit-backup-2024-03-10T12-00-00-000Z.json"
    )
    assert (
        build_backup_file_name("  ", FROZEN_NOW)
        == "stronghabit-backup-2024-03-10T12-00-00-000Z.json"
    )


def test_create_backup_with_label(
    backups: BackupService, habits: HabitRepository
) -> None:
    add_two_habits(habits)

    backup = backups.create_backup("My Report")

    assert "My-Report" in backup["file_name"]
    assert backup["habit_count"] == 2
    assert backup["id"] == backup["file_name"].removesuffix(".json")
    assert backup["size"] > 0


def test_backup_file_wraps_stored_document(
    backups: BackupService,
    habits: HabitRepository,
    files: FileStorage,
    store: MemoryKeyValueStore,
) -> None:
    add_two_habits(habits)

    backup = backups.create_backup()

    content = files.read_text(backup["file_name"])
    envelope = json.loads(content)
    assert envelope["appVersion"] == "9.9.9"
    assert pendulum.parse(envelope["exportDate"]) == FROZEN_NOW
    assert envelope["data"] == json.loads(store.get(configuration.HABITS_KEY) or "")
    assert '\n  "appVersion"' in content


def test_create_backup_without_document_fails(backups: BackupService) -> None:
    with pytest.raises(NoDataError):
        backups.create_backup()


def test_create_backup_stamps_auto_backup_config(
    backups: BackupService, habits: HabitRepository
) -> None:
    add_two_habits(habits)
    enable_auto_backup(backups)

    backups.create_backup("manual")

    config = backups.get_auto_backup_config()
    assert config is not None
    assert config["last_backup_date"] == FROZEN_NOW


def test_get_backups_skips_corrupted_files(
    backups: BackupService, habits: HabitRepository, files: FileStorage
) -> None:
    add_two_habits(habits)
    valid = backups.create_backup()
    files.write_text("broken-2024.json", "{ this is not json")
    files.write_text("notes.txt", "not a backup")

    assert [backup["file_name"] for backup in backups.get_backups()] == [
        valid["file_name"]
    ]


def test_get_backups_skips_files_whose_export_date_is_not_a_timestamp(
    backups: BackupService, habits: HabitRepository, files: FileStorage
) -> None:
    add_two_habits(habits)
    valid = backups.create_backup()
    files.write_text("odd.json", '{"exportDate": "P1D", "data": {"habits": []}}')

    assert [backup["file_name"] for backup in backups.get_backups()] == [
        valid["file_name"]
    ]


def test_get_backups_sorts_newest_first(
    backups: BackupService, habits: HabitRepository, clock: Clock
) -> None:
    add_two_habits(habits)
    older = backups.create_backup("first")
    clock.advance(minutes=5)
    newer = backups.create_backup("second")

    assert [backup["file_name"] for backup in backups.get_backups()] == [
        newer["file_name"],
        older["file_name"],
    ]


def test_restore_from_backup_reproduces_habits(
    backups: BackupService, habits: HabitRepository, clock: Clock
) -> None:
    add_two_habits(habits)
    before = habits.get_habits()
    backup = backups.create_backup()

    clock.advance(days=1)
    habits.add_habit({"name": "Added later", "frequency": "daily"})
    habits.delete_habit(before[0]["id"])

    assert backups.restore_from_file(backup["file_name"]) is True
    assert habits.get_habits() == before


def test_restore_from_missing_file_fails(backups: BackupService) -> None:
    with pytest.raises(BackupFileNotFoundError):
        backups.restore_from_file("stronghabit-backup-missing.json")


def test_restore_from_file_rejects_invalid_envelope(
    backups: BackupService, habits: HabitRepository, files: FileStorage
) -> None:
    add_two_habits(habits)
    backups.initialize_backup_system()
    files.write_text("odd.json", json.dumps({"appVersion": "1.0.0", "data": {}}))

    with pytest.raises(InvalidFormatError):
        backups.restore_from_file("odd.json")
    assert len(habits.get_habits()) == 2


@pytest.mark.parametrize("file_name", ["../escape.json", "nested/backup.json", ".."])
def test_file_names_with_paths_are_rejected(
    backups: BackupService, file_name: str
) -> None:
    with pytest.raises(ValidationError):
        backups.delete_backup(file_name)
    with pytest.raises(ValidationError):
        backups.restore_from_file(file_name)


def test_delete_backup(
    backups: BackupService, habits: HabitRepository, files: FileStorage
) -> None:
    add_two_habits(habits)
    backup = backups.create_backup()

    backups.delete_backup(backup["file_name"])
    backups.delete_backup(backup["file_name"])

    assert not files.exists(backup["file_name"])
    assert backups.get_backups() == []


def test_share_backup(
    backups: BackupService,
    habits: HabitRepository,
    files: FileStorage,
    sharer: RecordingSharer,
) -> None:
    add_two_habits(habits)
    backup = backups.create_backup()

    backups.share_backup(backup["file_name"])

    assert sharer.shared == [files.path_for(backup["file_name"])]


def test_share_without_sharing_support_fails(
    backups: BackupService, habits: HabitRepository, sharer: RecordingSharer
) -> None:
    add_two_habits(habits)
    backup = backups.create_backup()
    sharer.available = False

    with pytest.raises(SharingUnavailableError):
        backups.share_backup(backup["file_name"])


def test_export_creates_and_shares_backup(
    backups: BackupService, habits: HabitRepository, sharer: RecordingSharer
) -> None:
    add_two_habits(habits)

    backup = backups.export_backup()

    assert backup["file_name"].startswith("export-")
    assert [path.name for path in sharer.shared] == [backup["file_name"]]


def test_import_cancelled_by_user(
    backups: BackupService, habits: HabitRepository
) -> None:
    add_two_habits(habits)

    assert backups.import_backup() is False
    assert len(habits.get_habits()) == 2


def test_import_restores_picked_file(
    backups: BackupService,
    habits: HabitRepository,
    picker: FixedFilePicker,
    tmp_path: Path,
) -> None:
    envelope = {
        "appVersion": "1.0.0",
        "exportDate": "2024-02-01T10:00:00.000Z",
        "data": {
            "habits": [
                {
                    "id": "1706781600000",
                    "name": "Journal",
                    "frequency": "daily",
                    "selectedDays": [],
                    "createdAt": "2024-01-01T08:00:00.000Z",
                    "updatedAt": "2024-01-01T08:00:00.000Z",
                    "reminderEnabled": False,
                    "streak": 0,
                    "completionLogs": [{"date": "2024-01-31", "completed": True}],
                }
            ],
            "lastUpdated": "2024-02-01T10:00:00.000Z",
            "version": 1,
        },
    }
    picked = tmp_path / "picked.json"
    picked.write_text(json.dumps(envelope), encoding="utf-8")
    picker.path = picked

    assert backups.import_backup() is True

    restored = habits.get_habits()
    assert [habit["name"] for habit in restored] == ["Journal"]
    assert restored[0]["streak"] == 1
    assert [backup["file_name"] for backup in backups.get_backups()] == [
        "imported-2024-03-10T12-00-00-000Z.json"
    ]


def test_import_of_missing_file_fails(
    backups: BackupService, picker: FixedFilePicker, tmp_path: Path
) -> None:
    picker.path = tmp_path / "gone.json"

    with pytest.raises(BackupFileNotFoundError):
        backups.import_backup()


def test_auto_backup_disabled_by_default(
    backups: BackupService, habits: HabitRepository
) -> None:
    add_two_habits(habits)

    assert backups.should_run_auto_backup() is False
    assert backups.run_auto_backup_if_needed() is False


def test_auto_backup_without_data_is_skipped(backups: BackupService) -> None:
    enable_auto_backup(backups)

    assert backups.run_auto_backup_if_needed() is False
    assert backups.get_backups() == []


def test_auto_backup_runs_once_per_cadence(
    backups: BackupService, habits: HabitRepository, clock: Clock
) -> None:
    add_two_habits(habits)
    enable_auto_backup(backups)

    assert backups.run_auto_backup_if_needed() is True
    clock.advance(hours=12)
    assert backups.run_auto_backup_if_needed() is False
    clock.advance(hours=13)
    assert backups.run_auto_backup_if_needed() is True


def test_auto_backup_keeps_newest_files_within_retention(
    backups: BackupService, habits: HabitRepository, clock: Clock
) -> None:
    add_two_habits(habits)
    enable_auto_backup(backups, retention=2)
    manual = backups.create_backup("manual")

    created = []
    for _ in range(4):
        clock.advance(days=2)
        assert backups.run_auto_backup_if_needed() is True
        created.append(build_backup_file_name("auto", clock.now))

    remaining = [backup["file_name"] for backup in backups.get_backups()]
    assert remaining == [created[3], created[2], manual["file_name"]]


def test_retention_continues_past_a_failed_delete(
    store: MemoryKeyValueStore,
    habits: HabitRepository,
    sharer: RecordingSharer,
    picker: FixedFilePicker,
    clock: Clock,
    tmp_path: Path,
) -> None:
    class LockedFileStorage(FileStorage):
        def __init__(self, directory: Path) -> None:
            super().__init__(directory)
            self.locked: set[str] = set()

        def delete(self, file_name: str) -> None:
            if file_name in self.locked:
                raise OSError("file is locked")
            super().delete(file_name)

    files = LockedFileStorage(tmp_path / "locked")
    backups = BackupService(store, files, habits, sharer, picker, app_version="9.9.9")
    add_two_habits(habits)
    enable_auto_backup(backups, retention=10)

    created = []
    for _ in range(4):
        clock.advance(days=2)
        assert backups.run_auto_backup_if_needed() is True
        created.append(build_backup_file_name("auto", clock.now))
    files.locked.add(created[0])

    enable_auto_backup(backups, retention=1)
    clock.advance(days=2)
    assert backups.run_auto_backup_if_needed() is True
    newest = build_backup_file_name("auto", clock.now)

    remaining = [backup["file_name"] for backup in backups.get_backups()]
    assert remaining == [newest, created[0]]


def test_auto_backup_runs_beside_a_file_with_a_bad_export_date(
    backups: BackupService, habits: HabitRepository, files: FileStorage
) -> None:
    add_two_habits(habits)
    enable_auto_backup(backups, retention=1)
    backups.initialize_backup_system()
    files.write_text("auto-odd.json", '{"exportDate": "P1D", "data": {"habits": []}}')

    assert backups.run_auto_backup_if_needed() is True
    assert len(backups.get_backups()) == 1


@pytest.mark.parametrize(
    "file_name,expected",
    [
        ("auto-2024-03-10T12-00-00-000Z.json", "auto"),
        ("export-2024-03-10T12-00-00-000Z.json", "export"),
        ("cloud-sync-2024-03-10T12-00-00-000Z.json", "cloud-sync"),
        ("cloud-backup-2024-03-10T12-00-00-000Z.json", "cloud-backup"),
        ("imported-2024-03-10T12-00-00-000Z.json", "imported"),
        ("stronghabit-backup-2024-03-10T12-00-00-000Z.json", "manual"),
        ("before-trip-2024-03-10T12-00-00-000Z.json", "manual"),
    ],
)
def test_backup_type_follows_file_name_label(file_name: str, expected: str) -> None:
    assert backup_type(file_name) == expected


@pytest.mark.parametrize(
    "frequency,last_run,now,expected",
    [
        ("daily", "2024-03-09T11:00:00Z", "2024-03-10T12:00:00Z", True),
        ("daily", "2024-03-10T00:00:00Z", "2024-03-10T12:00:00Z", False),
        ("weekly", "2024-03-04T12:00:00Z", "2024-03-10T12:00:00Z", False),
        ("weekly", "2024-03-01T12:00:00Z", "2024-03-10T12:00:00Z", True),
        ("monthly", "2024-02-15T12:00:00Z", "2024-03-15T12:00:00Z", True),
        ("monthly", "2024-03-05T12:00:00Z", "2024-03-20T12:00:00Z", False),
        ("monthly", "2023-03-15T12:00:00Z", "2024-03-15T12:00:00Z", True),
    ],
)
def test_is_due(frequency: str, last_run: str, now: str, expected: bool) -> None:
    assert (
        is_due(
            pendulum.parse(last_run),  # type: ignore[arg-type]
            frequency,
            pendulum.parse(now),  # type: ignore[arg-type]
        )
        is expected
    )
