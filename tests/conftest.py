# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Optional

import pendulum
import pytest

from stronghabit import configuration
from stronghabit.adapter.file_storage import FileStorage
from stronghabit.adapter.key_value import MemoryKeyValueStore
from stronghabit.app_context import AppContext, build_app_context
from stronghabit.model.backup import CloudAccount
from stronghabit.repository.configuration import ConfigurationRepository
from stronghabit.repository.habit import HabitRepository
from stronghabit.service.backup import BackupService
from stronghabit.service.cloud import CloudSyncService

FROZEN_NOW = pendulum.datetime(2024, 3, 10, 12, 0, 0, tz="UTC")


class Clock:
    def __init__(self, now: pendulum.DateTime) -> None:
        self.now = now

    def __call__(self) -> pendulum.DateTime:
        return self.now

    def advance(self, **kwargs: int) -> None:
        self.now = self.now.add(**kwargs)


class RecordingReminderScheduler:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.scheduled: list[tuple[str, int, int]] = []
        self.cancelled: list[str] = []

    def schedule(
        self, habit_id: str, title: str, body: str, hour: int, minute: int
    ) -> Optional[str]:
        if self.fail:
            raise RuntimeError("notifications unavailable")
        self.scheduled.append((habit_id, hour, minute))
        return f"notification-{len(self.scheduled)}"

    def cancel(self, notification_id: str) -> None:
        if self.fail:
            raise RuntimeError("notifications unavailable")
        self.cancelled.append(notification_id)


class RecordingSharer:
    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.shared: list[Path] = []

    def is_available(self) -> bool:
        return self.available

    def share(self, path: Path) -> None:
        self.shared.append(path)


class FixedFilePicker:
    def __init__(self, path: Optional[Path]) -> None:
        self.path = path

    def pick(self) -> Optional[Path]:
        return self.path


class RecordingCloudProvider:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.uploaded: list[str] = []
        self.latest: Optional[str] = None

    def authenticate(self) -> CloudAccount:
        if self.fail:
            raise OSError("network unreachable")
        return {"user_id": "user-1", "email": "user@example.com"}

    def upload(self, path: Path) -> None:
        if self.fail:
            raise OSError("network unreachable")
        self.uploaded.append(path.name)
        self.latest = path.read_text(encoding="utf-8")

    def download_latest(self, destination: Path) -> None:
        if self.fail or self.latest is None:
            raise OSError("nothing to download")
        destination.write_text(self.latest, encoding="utf-8")


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> Clock:
    frozen_clock = Clock(FROZEN_NOW)
    monkeypatch.setattr("stronghabit.time.now_utc", frozen_clock)
    return frozen_clock


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def files(tmp_path: Path) -> FileStorage:
    return FileStorage(tmp_path / "backups")


@pytest.fixture
def reminders() -> RecordingReminderScheduler:
    return RecordingReminderScheduler()


@pytest.fixture
def sharer() -> RecordingSharer:
    return RecordingSharer()


@pytest.fixture
def picker() -> FixedFilePicker:
    return FixedFilePicker(None)


@pytest.fixture
def cloud_provider() -> RecordingCloudProvider:
    return RecordingCloudProvider()


@pytest.fixture
def habits(
    clock: Clock, store: MemoryKeyValueStore, reminders: RecordingReminderScheduler
) -> HabitRepository:
    return HabitRepository(store, reminders)


@pytest.fixture
def backups(
    store: MemoryKeyValueStore,
    files: FileStorage,
    habits: HabitRepository,
    sharer: RecordingSharer,
    picker: FixedFilePicker,
) -> BackupService:
    return BackupService(store, files, habits, sharer, picker, app_version="9.9.9")


@pytest.fixture
def cloud(
    store: MemoryKeyValueStore,
    backups: BackupService,
    cloud_provider: RecordingCloudProvider,
) -> CloudSyncService:
    return CloudSyncService(store, backups, cloud_provider)


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    config_path = tmp_path / "config" / "config.yaml"
    config_path.parent.mkdir(parents=True)
    config_path.touch()
    monkeypatch.setattr(configuration, "APP_CONFIG_PATH", config_path)
    return config_path


@pytest.fixture
def app_context(
    clock: Clock,
    config_file: Path,
    store: MemoryKeyValueStore,
    files: FileStorage,
    reminders: RecordingReminderScheduler,
    sharer: RecordingSharer,
    picker: FixedFilePicker,
    cloud_provider: RecordingCloudProvider,
) -> AppContext:
    app_context = build_app_context(
        ConfigurationRepository(),
        store=store,
        files=files,
        reminders=reminders,
        sharer=sharer,
        picker=picker,
        cloud_provider=cloud_provider,
    )
    # Pin "today" regardless of the machine's timezone
    app_context.settings.set_timezone_offset(0)
    app_context.habits.initialize()
    return app_context
