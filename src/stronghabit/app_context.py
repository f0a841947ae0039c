# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import platformdirs

from stronghabit import configuration
from stronghabit.adapter.collaborators import (
    CloudProvider,
    FilePicker,
    FolderCloudProvider,
    FolderSharer,
    LoggingReminderScheduler,
    NullCloudProvider,
    PathFilePicker,
    ReminderScheduler,
    Sharer,
)
from stronghabit.adapter.file_storage import FileStorage
from stronghabit.adapter.key_value import FileKeyValueStore, KeyValueStore
from stronghabit.repository.configuration import ConfigurationRepository
from stronghabit.repository.habit import HabitRepository
from stronghabit.repository.settings import SettingsRepository
from stronghabit.service.backup import BackupService
from stronghabit.service.cloud import CloudSyncService


@dataclass
class AppContext:
    """Everything a command needs, built once per process."""

    configuration: ConfigurationRepository
    store: KeyValueStore
    files: FileStorage
    settings: SettingsRepository
    habits: HabitRepository
    backups: BackupService
    cloud: CloudSyncService

    def backups_with(
        self, sharer: Optional[Sharer] = None, picker: Optional[FilePicker] = None
    ) -> BackupService:
        """A backup service sharing this context's storage but other collaborators."""
        return BackupService(
            self.store,
            self.files,
            self.habits,
            sharer if sharer is not None else self.backups.sharer,
            picker if picker is not None else self.backups.picker,
        )


def build_app_context(
    configuration_repository: ConfigurationRepository,
    store: Optional[KeyValueStore] = None,
    files: Optional[FileStorage] = None,
    reminders: Optional[ReminderScheduler] = None,
    sharer: Optional[Sharer] = None,
    picker: Optional[FilePicker] = None,
    cloud_provider: Optional[CloudProvider] = None,
) -> AppContext:
    config = configuration_repository.get_config()

    if store is None:
        store = FileKeyValueStore(configuration.DATA_STORE_DIR)
    if files is None:
        files = FileStorage(configuration.BACKUP_DIR)
    if reminders is None:
        reminders = LoggingReminderScheduler()
    if sharer is None:
        sharer = FolderSharer(platformdirs.user_downloads_path())
    if picker is None:
        picker = PathFilePicker(None)
    if cloud_provider is None:
        cloud_folder = config.get("cloud_folder")
        cloud_provider = (
            FolderCloudProvider(Path(cloud_folder))
            if cloud_folder is not None
            else NullCloudProvider()
        )

    settings = SettingsRepository(store)
    habits = HabitRepository(store, reminders)
    backups = BackupService(store, files, habits, sharer, picker)
    cloud = CloudSyncService(store, backups, cloud_provider)

    return AppContext(
        configuration=configuration_repository,
        store=store,
        files=files,
        settings=settings,
        habits=habits,
        backups=backups,
        cloud=cloud,
    )
