# SPDX-License-Identifier: MIT

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from stronghabit import time
from stronghabit.model.backup import AutoBackupConfig, BackupMetadata, CloudBackupConfig
from stronghabit.service.backup import backup_type
from stronghabit.view.header import header


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def backups_view(backups: list[BackupMetadata]) -> None:
    """Display backups, newest first."""
    header("backups")

    backups_table = Table(box=box.SIMPLE)
    backups_table.add_column("file")
    backups_table.add_column("type")
    backups_table.add_column("created")
    backups_table.add_column("habits", justify="right")
    backups_table.add_column("size", justify="right")

    for backup in backups:
        backups_table.add_row(
            backup["file_name"],
            backup_type(backup["file_name"]),
            time.datetime_to_display_local_datetime_str(backup["created_at"]),
            str(backup["habit_count"]),
            format_size(backup["size"]),
        )

    console = Console()
    console.print(backups_table)


def single_backup_view(backup: BackupMetadata) -> None:
    header("backup")

    backup_table = Table(box=box.SIMPLE)
    backup_table.add_column("property")
    backup_table.add_column("value")
    backup_table.add_row("file", backup["file_name"])
    backup_table.add_row("type", backup_type(backup["file_name"]))
    backup_table.add_row(
        "created", time.datetime_to_display_local_datetime_str(backup["created_at"])
    )
    backup_table.add_row("habits", str(backup["habit_count"]))
    backup_table.add_row("size", format_size(backup["size"]))

    console = Console()
    console.print(backup_table)


def auto_backup_config_view(config: Optional[AutoBackupConfig]) -> None:
    header("auto backup")

    config_table = Table(box=box.SIMPLE)
    config_table.add_column("setting")
    config_table.add_column("value")

    if config is None:
        config_table.add_row("enabled", "False")
    else:
        config_table.add_row("enabled", str(config["enabled"]))
        config_table.add_row("frequency", config["frequency"])
        config_table.add_row("retention", str(config["retention"]))
        config_table.add_row(
            "last backup",
            time.datetime_to_display_local_datetime_str_optional(
                config["last_backup_date"]
            )
            or "never",
        )

    console = Console()
    console.print(config_table)


def cloud_config_view(config: Optional[CloudBackupConfig]) -> None:
    header("cloud sync")

    config_table = Table(box=box.SIMPLE)
    config_table.add_column("setting")
    config_table.add_column("value")

    if config is None:
        config_table.add_row("provider", "none")
    else:
        config_table.add_row("provider", config["provider"])
        config_table.add_row("account", config["email"] or config["user_id"] or "")
        config_table.add_row("auto sync", str(config["auto_sync"]))
        config_table.add_row("frequency", config["sync_frequency"])
        config_table.add_row(
            "last sync",
            time.datetime_to_display_local_datetime_str_optional(
                config["last_sync_date"]
            )
            or "never",
        )

    console = Console()
    console.print(config_table)
