# SPDX-License-Identifier: MIT

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

import pendulum

from stronghabit import configuration, time
from stronghabit.adapter.collaborators import FilePicker, Sharer
from stronghabit.adapter.file_storage import FileStorage
from stronghabit.adapter.key_value import KeyValueStore
from stronghabit.errors import (
    BackupFileNotFoundError,
    InvalidFormatError,
    NoDataError,
    NotFoundError,
    SharingUnavailableError,
    StrongHabitError,
    ValidationError,
    storage_errors,
)
from stronghabit.model.backup import (
    AutoBackupConfig,
    BackupEnvelope,
    BackupMetadata,
)
from stronghabit.repository.habit import HabitRepository

logger = logging.getLogger(__name__)

DEFAULT_BACKUP_PREFIX = "stronghabit-backup"
AUTO_BACKUP_LABEL = "auto"
EXPORT_BACKUP_LABEL = "export"
CLOUD_SYNC_BACKUP_LABEL = "cloud-sync"
IMPORTED_BACKUP_LABEL = "imported"
CLOUD_DOWNLOAD_PREFIX = "cloud-backup"
BACKUP_SUFFIX = ".json"
DEFAULT_RETENTION = 5


def sanitize_label(label: str) -> str:
    """Strip characters outside word/space/hyphen and join words with hyphens."""
    stripped = re.sub(r"[^\w\s-]", "", label)
    return re.sub(r"\s+", "-", stripped.strip())


def build_backup_file_name(label: Optional[str], moment: pendulum.DateTime) -> str:
    prefix = sanitize_label(label) if label is not None else ""
    if prefix == "":
        prefix = DEFAULT_BACKUP_PREFIX
    return f"{prefix}-{time.datetime_to_file_timestamp(moment)}{BACKUP_SUFFIX}"


def backup_type(file_name: str) -> str:
    """Classify a backup by the label embedded in its file name."""
    for label in (
        CLOUD_SYNC_BACKUP_LABEL,
        CLOUD_DOWNLOAD_PREFIX,
        IMPORTED_BACKUP_LABEL,
        EXPORT_BACKUP_LABEL,
        AUTO_BACKUP_LABEL,
    ):
        if label in file_name:
            return label
    return "manual"


def validate_file_name(file_name: str) -> None:
    if (
        file_name in ("", ".", "..")
        or file_name != Path(file_name).name
        or "\\" in file_name
    ):
        raise ValidationError(f"Invalid backup file name: {file_name}")


def is_due(
    last_run: pendulum.DateTime, frequency: str, now: pendulum.DateTime
) -> bool:
    """
    Whether a scheduled job last run at `last_run` should run again at `now`.

    daily and weekly compare against now minus one or seven calendar days;
    monthly runs whenever the month or year differs.
    """
    if frequency == "daily":
        return last_run < now.subtract(days=1)
    if frequency == "weekly":
        return last_run < now.subtract(days=7)
    if frequency == "monthly":
        last_local = last_run.in_tz("local")
        now_local = now.in_tz("local")
        return last_local.month != now_local.month or last_local.year != now_local.year
    logger.warning("unknown schedule frequency %r", frequency)
    return False


def parse_envelope(content: str) -> BackupEnvelope:
    try:
        envelope = json.loads(content)
    except ValueError as error:
        raise InvalidFormatError("Invalid backup file format") from error
    if (
        not isinstance(envelope, dict)
        or not envelope.get("data")
        or not envelope.get("exportDate")
    ):
        raise InvalidFormatError("Invalid backup file format")
    return envelope  # type: ignore[return-value]


class BackupService:
    """Snapshots the habit document to files and restores it from them."""

    def __init__(
        self,
        store: KeyValueStore,
        files: FileStorage,
        habits: HabitRepository,
        sharer: Sharer,
        picker: FilePicker,
        app_version: str = configuration.APP_VERSION,
    ) -> None:
        self.store = store
        self.files = files
        self.habits = habits
        self.sharer = sharer
        self.picker = picker
        self.app_version = app_version

    def initialize_backup_system(self) -> None:
        with storage_errors("Failed to initialize backup system"):
            self.files.ensure_directory()

    def create_backup(self, label: Optional[str] = None) -> BackupMetadata:
        self.initialize_backup_system()

        with storage_errors("Failed to create backup"):
            serialized_document = self.store.get(configuration.HABITS_KEY)
            if serialized_document is None:
                raise NoDataError("No data to backup")

            document = json.loads(serialized_document)
            habits = document.get("habits") if isinstance(document, dict) else None
            if not isinstance(habits, list):
                raise ValueError("stored document has no habits array")

            now = time.now_utc()
            file_name = build_backup_file_name(label, now)
            envelope: BackupEnvelope = {
                "appVersion": self.app_version,
                "exportDate": time.datetime_to_iso_str(now),
                "data": document,
            }
            self.files.write_text(file_name, json.dumps(envelope, indent=2))

            metadata: BackupMetadata = {
                "id": file_name.removesuffix(BACKUP_SUFFIX),
                "file_name": file_name,
                "created_at": now,
                "habit_count": len(habits),
                "size": self.files.size(file_name),
            }
        logger.info("created backup %s with %d habits", file_name, len(habits))

        self.__update_last_backup_date(now)

        return metadata

    def __update_last_backup_date(self, moment: pendulum.DateTime) -> None:
        try:
            config = self.get_auto_backup_config()
            if config is not None:
                config["last_backup_date"] = moment
                self.set_auto_backup_config(config)
        except StrongHabitError as error:
            logger.warning("failed to update last backup date: %s", error)

    def get_backups(self) -> list[BackupMetadata]:
        self.initialize_backup_system()

        backups: list[BackupMetadata] = []
        with storage_errors("Failed to retrieve backups"):
            file_names = self.files.list_files()

        for file_name in file_names:
            if not file_name.endswith(BACKUP_SUFFIX):
                continue
            try:
                backups.append(self.__read_metadata(file_name))
            except (OSError, ValueError, TypeError, AttributeError) as error:
                logger.warning("skipping invalid backup file %s: %s", file_name, error)

        return sorted(backups, key=lambda backup: backup["created_at"], reverse=True)

    def __read_metadata(self, file_name: str) -> BackupMetadata:
        parsed = json.loads(self.files.read_text(file_name))
        if not isinstance(parsed, dict):
            raise ValueError("backup is not an object")

        export_date = parsed.get("exportDate")
        created_at = (
            time.datetime_from_str(export_date)
            if export_date is not None
            else time.now_utc()
        )
        data = parsed.get("data")
        habits = data.get("habits") if isinstance(data, dict) else None

        return {
            "id": file_name.removesuffix(BACKUP_SUFFIX),
            "file_name": file_name,
            "created_at": created_at,
            "habit_count": len(habits) if isinstance(habits, list) else 0,
            "size": self.files.size(file_name),
        }

    def delete_backup(self, file_name: str) -> None:
        validate_file_name(file_name)
        try:
            self.files.delete(file_name)
        except OSError as error:
            logger.error("failed to delete backup %s: %s", file_name, error)
            raise NotFoundError(f"Failed to delete backup {file_name}") from error
        logger.info("deleted backup %s", file_name)

    def share_backup(self, file_name: str) -> None:
        validate_file_name(file_name)
        if not self.files.exists(file_name):
            raise BackupFileNotFoundError(f"Backup file not found: {file_name}")

        if not self.sharer.is_available():
            raise SharingUnavailableError("Sharing is not available on this device")

        try:
            self.sharer.share(self.files.path_for(file_name))
        except OSError as error:
            logger.error("failed to share backup %s: %s", file_name, error)
            raise SharingUnavailableError(
                f"Failed to share backup {file_name}"
            ) from error
        logger.info("shared backup %s", file_name)

    def export_backup(self) -> BackupMetadata:
        metadata = self.create_backup(EXPORT_BACKUP_LABEL)
        self.share_backup(metadata["file_name"])
        return metadata

    def import_backup(self) -> bool:
        path = self.picker.pick()
        if path is None:
            return False
        if not path.is_file():
            raise BackupFileNotFoundError(f"Backup file not found: {path}")

        with storage_errors("Failed to import backup"):
            content = path.read_text(encoding="utf-8")

        envelope = parse_envelope(content)
        restored = self.habits.restore_data(json.dumps(envelope["data"]))
        logger.info("imported backup from %s", path)

        self.__keep_imported_copy(path)
        return restored

    def __keep_imported_copy(self, path: Path) -> None:
        file_name = build_backup_file_name(IMPORTED_BACKUP_LABEL, time.now_utc())
        try:
            self.initialize_backup_system()
            self.files.copy_in(path, file_name)
        except (OSError, StrongHabitError) as error:
            logger.warning("failed to keep a copy of imported backup %s: %s", path, error)

    def restore_from_file(self, file_name: str) -> bool:
        validate_file_name(file_name)
        if not self.files.exists(file_name):
            raise BackupFileNotFoundError(f"Backup file not found: {file_name}")

        with storage_errors("Failed to restore from backup file"):
            content = self.files.read_text(file_name)

        envelope = parse_envelope(content)
        restored = self.habits.restore_data(json.dumps(envelope["data"]))
        logger.info("restored backup %s", file_name)
        return restored

    def get_auto_backup_config(self) -> Optional[AutoBackupConfig]:
        with storage_errors("Failed to retrieve auto backup settings"):
            serialized_config = self.store.get(configuration.AUTO_BACKUP_CONFIG_KEY)
            if serialized_config is None:
                return None
            return self.__convert_config_for_deserialization(
                json.loads(serialized_config)
            )

    def set_auto_backup_config(self, config: AutoBackupConfig) -> None:
        with storage_errors("Failed to save auto backup settings"):
            self.store.set(
                configuration.AUTO_BACKUP_CONFIG_KEY,
                json.dumps(self.__convert_config_for_serialization(config)),
            )

    def __convert_config_for_serialization(
        self, config: AutoBackupConfig
    ) -> dict[str, Any]:
        serializable_config: dict[str, Any] = {
            "enabled": config["enabled"],
            "frequency": config["frequency"],
            "retention": config["retention"],
        }
        if config["last_backup_date"] is not None:
            serializable_config["lastBackupDate"] = time.datetime_to_iso_str(
                config["last_backup_date"]
            )
        return serializable_config

    def __convert_config_for_deserialization(
        self, raw_config: dict[str, Any]
    ) -> AutoBackupConfig:
        return {
            "enabled": bool(raw_config.get("enabled", False)),
            "frequency": raw_config.get("frequency", "daily"),
            "retention": int(raw_config.get("retention", DEFAULT_RETENTION)),
            "last_backup_date": time.datetime_from_str_optional(
                raw_config.get("lastBackupDate")
            ),
        }

    def should_run_auto_backup(self) -> bool:
        config = self.get_auto_backup_config()
        if config is None or not config["enabled"]:
            return False
        if config["last_backup_date"] is None:
            return True
        return is_due(config["last_backup_date"], config["frequency"], time.now_utc())

    def run_auto_backup_if_needed(self) -> bool:
        if not self.should_run_auto_backup():
            return False

        try:
            self.create_backup(AUTO_BACKUP_LABEL)
        except NoDataError:
            logger.info("skipped auto backup, there is no data yet")
            return False

        config = self.get_auto_backup_config()
        if config is None:
            return True
        self.__apply_retention(config["retention"])

        return True

    def __apply_retention(self, retention: int) -> None:
        auto_backups = [
            backup
            for backup in self.get_backups()
            if AUTO_BACKUP_LABEL in backup["file_name"]
        ]
        if len(auto_backups) <= retention:
            return

        oldest_first = sorted(auto_backups, key=lambda backup: backup["created_at"])
        for backup in oldest_first[: len(auto_backups) - max(retention, 0)]:
            try:
                self.delete_backup(backup["file_name"])
            except StrongHabitError as error:
                logger.warning(
                    "failed to delete old auto backup %s: %s", backup["file_name"], error
                )
