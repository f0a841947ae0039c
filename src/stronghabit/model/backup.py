# SPDX-License-Identifier: MIT

from typing import Any, Literal, Optional, TypedDict

import pendulum

BackupFrequency = Literal["daily", "weekly", "monthly"]
CloudProviderName = Literal["google-drive", "dropbox", "icloud", "none"]

BACKUP_FREQUENCIES: list[str] = ["daily", "weekly", "monthly"]
CLOUD_PROVIDERS: list[str] = ["google-drive", "dropbox", "icloud", "none"]


class BackupMetadata(TypedDict):
    id: str  # File name without extension
    file_name: str
    created_at: pendulum.DateTime
    habit_count: int
    size: int  # Bytes


class BackupEnvelope(TypedDict):
    appVersion: str
    exportDate: str
    data: dict[str, Any]  # Serialized StorageDocument


class AutoBackupConfig(TypedDict):
    enabled: bool
    frequency: BackupFrequency
    retention: int  # Number of auto backups to keep
    last_backup_date: Optional[pendulum.DateTime]


class CloudBackupConfig(TypedDict):
    provider: CloudProviderName
    auto_sync: bool
    last_sync_date: Optional[pendulum.DateTime]
    sync_frequency: BackupFrequency
    user_id: Optional[str]
    email: Optional[str]


class CloudAccount(TypedDict):
    user_id: str
    email: Optional[str]
