# SPDX-License-Identifier: MIT

import json
import logging
from typing import Any, Optional

from stronghabit import configuration, time
from stronghabit.adapter.collaborators import CloudProvider
from stronghabit.adapter.key_value import KeyValueStore
from stronghabit.errors import (
    BackupFileNotFoundError,
    CloudConnectionError,
    StrongHabitError,
    ValidationError,
    storage_errors,
)
from stronghabit.model.backup import CLOUD_PROVIDERS, CloudBackupConfig
from stronghabit.service.backup import (
    BACKUP_SUFFIX,
    CLOUD_DOWNLOAD_PREFIX,
    CLOUD_SYNC_BACKUP_LABEL,
    BackupService,
    is_due,
    validate_file_name,
)

logger = logging.getLogger(__name__)


class CloudSyncService:
    """Pushes backups to a cloud provider on a schedule."""

    def __init__(
        self, store: KeyValueStore, backups: BackupService, provider: CloudProvider
    ) -> None:
        self.store = store
        self.backups = backups
        self.provider = provider

    def get_cloud_backup_config(self) -> Optional[CloudBackupConfig]:
        with storage_errors("Failed to retrieve cloud backup settings"):
            serialized_config = self.store.get(configuration.CLOUD_BACKUP_CONFIG_KEY)
            if serialized_config is None:
                return None
            return self.__convert_config_for_deserialization(
                json.loads(serialized_config)
            )

    def set_cloud_backup_config(self, config: CloudBackupConfig) -> None:
        with storage_errors("Failed to save cloud backup settings"):
            self.store.set(
                configuration.CLOUD_BACKUP_CONFIG_KEY,
                json.dumps(self.__convert_config_for_serialization(config)),
            )

    def __convert_config_for_serialization(
        self, config: CloudBackupConfig
    ) -> dict[str, Any]:
        serializable_config: dict[str, Any] = {
            "provider": config["provider"],
            "autoSync": config["auto_sync"],
            "lastSyncDate": time.datetime_to_iso_str_optional(config["last_sync_date"]),
            "syncFrequency": config["sync_frequency"],
            "userId": config["user_id"],
            "email": config["email"],
        }
        return {
            key: value for key, value in serializable_config.items() if value is not None
        }

    def __convert_config_for_deserialization(
        self, raw_config: dict[str, Any]
    ) -> CloudBackupConfig:
        return {
            "provider": raw_config.get("provider", "none"),
            "auto_sync": bool(raw_config.get("autoSync", False)),
            "last_sync_date": time.datetime_from_str_optional(
                raw_config.get("lastSyncDate")
            ),
            "sync_frequency": raw_config.get("syncFrequency", "daily"),
            "user_id": raw_config.get("userId"),
            "email": raw_config.get("email"),
        }

    def __require_provider(self) -> CloudBackupConfig:
        config = self.get_cloud_backup_config()
        if config is None or config["provider"] == "none":
            raise CloudConnectionError("No cloud provider configured")
        return config

    def initialize_cloud_provider(self, provider: str) -> CloudBackupConfig:
        if provider not in CLOUD_PROVIDERS:
            raise ValidationError(
                f"Invalid cloud provider: {provider}. Valid options: {', '.join(CLOUD_PROVIDERS)}"
            )

        if provider == "none":
            disabled_config: CloudBackupConfig = {
                "provider": "none",
                "auto_sync": False,
                "last_sync_date": None,
                "sync_frequency": "daily",
                "user_id": None,
                "email": None,
            }
            self.set_cloud_backup_config(disabled_config)
            return disabled_config

        try:
            account = self.provider.authenticate()
        except OSError as error:
            logger.error("failed to authenticate with %s: %s", provider, error)
            raise CloudConnectionError(
                f"Failed to set up {provider} integration"
            ) from error

        config: CloudBackupConfig = {
            "provider": provider,  # type: ignore[typeddict-item]
            "auto_sync": True,
            "last_sync_date": time.now_utc(),
            "sync_frequency": "daily",
            "user_id": account["user_id"],
            "email": account["email"],
        }
        self.set_cloud_backup_config(config)
        logger.info("connected cloud provider %s", provider)
        return config

    def upload_to_cloud(self, file_name: str) -> bool:
        config = self.__require_provider()

        validate_file_name(file_name)
        if not self.backups.files.exists(file_name):
            raise BackupFileNotFoundError(f"Backup file not found: {file_name}")

        try:
            self.provider.upload(self.backups.files.path_for(file_name))
        except OSError as error:
            logger.error("failed to upload to %s: %s", config["provider"], error)
            raise CloudConnectionError(
                f"Failed to upload to {config['provider']}"
            ) from error

        self.__update_last_sync_date()
        logger.info("uploaded %s to %s", file_name, config["provider"])
        return True

    def download_from_cloud(self) -> str:
        config = self.__require_provider()
        self.backups.initialize_backup_system()

        file_name = (
            f"{CLOUD_DOWNLOAD_PREFIX}-"
            f"{time.datetime_to_file_timestamp(time.now_utc())}{BACKUP_SUFFIX}"
        )
        try:
            self.provider.download_latest(self.backups.files.path_for(file_name))
        except OSError as error:
            logger.error("failed to download from %s: %s", config["provider"], error)
            raise CloudConnectionError(
                f"Failed to download from {config['provider']}"
            ) from error

        logger.info("downloaded %s from %s", file_name, config["provider"])
        return file_name

    def __update_last_sync_date(self) -> None:
        try:
            config = self.get_cloud_backup_config()
            if config is not None:
                config["last_sync_date"] = time.now_utc()
                self.set_cloud_backup_config(config)
        except StrongHabitError as error:
            logger.warning("failed to update last sync date: %s", error)

    def sync_to_cloud(self) -> bool:
        self.__require_provider()
        backup = self.backups.create_backup(CLOUD_SYNC_BACKUP_LABEL)
        return self.upload_to_cloud(backup["file_name"])

    def should_run_cloud_sync(self) -> bool:
        config = self.get_cloud_backup_config()
        if config is None or not config["auto_sync"] or config["provider"] == "none":
            return False
        if config["last_sync_date"] is None:
            return True
        return is_due(config["last_sync_date"], config["sync_frequency"], time.now_utc())

    def run_cloud_sync_if_needed(self) -> bool:
        if not self.should_run_cloud_sync():
            return False
        return self.sync_to_cloud()
