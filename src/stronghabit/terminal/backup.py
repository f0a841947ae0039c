# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from stronghabit.adapter.collaborators import FolderSharer, PathFilePicker
from stronghabit.model.backup import BACKUP_FREQUENCIES, AutoBackupConfig
from stronghabit.service.backup import DEFAULT_RETENTION
from stronghabit.terminal.context import get_app_context, report_errors
from stronghabit.terminal.custom_typer import AliasedTyperGroup
from stronghabit.view.backup import (
    auto_backup_config_view,
    backups_view,
    single_backup_view,
)

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

console = Console()


@app.command("create, c")
def create(
    ctx: typer.Context,
    label: Annotated[
        Optional[str],
        typer.Option("--label", "-l", help="prefix for the backup file name"),
    ] = None,
) -> None:
    """Write a snapshot of all habits to a backup file."""
    app_context = get_app_context(ctx)

    with report_errors("create backup"):
        backup = app_context.backups.create_backup(label)

    single_backup_view(backup)


@app.command("list, ls")
def list_backups(ctx: typer.Context) -> None:
    """List backup files, newest first."""
    app_context = get_app_context(ctx)

    with report_errors("retrieve backups"):
        backups = app_context.backups.get_backups()

    backups_view(backups)


@app.command("delete, del", no_args_is_help=True)
def delete(ctx: typer.Context, file_name: str) -> None:
    """Delete a backup file."""
    app_context = get_app_context(ctx)

    with report_errors("delete backup"):
        app_context.backups.delete_backup(file_name)

    console.print(f"Deleted backup {file_name}")


@app.command("share, sh", no_args_is_help=True)
def share(
    ctx: typer.Context,
    file_name: str,
    to: Annotated[
        Optional[Path],
        typer.Option(
            "--to", "-t", help="folder to share into, the downloads folder by default"
        ),
    ] = None,
) -> None:
    """Share a backup file by copying it into a folder."""
    app_context = get_app_context(ctx)
    backups = (
        app_context.backups_with(sharer=FolderSharer(to))
        if to is not None
        else app_context.backups
    )

    with report_errors("share backup"):
        backups.share_backup(file_name)

    console.print(f"Shared backup {file_name}")


@app.command("export, ex")
def export(
    ctx: typer.Context,
    to: Annotated[
        Optional[Path],
        typer.Option(
            "--to", "-t", help="folder to share into, the downloads folder by default"
        ),
    ] = None,
) -> None:
    """Create a backup and share it."""
    app_context = get_app_context(ctx)
    backups = (
        app_context.backups_with(sharer=FolderSharer(to))
        if to is not None
        else app_context.backups
    )

    with report_errors("export data"):
        backup = backups.export_backup()

    console.print(f"Exported backup {backup['file_name']}")


def __confirm_replace(yes: bool) -> bool:
    if yes:
        return True
    console.print("[yellow]WARNING: This will replace all current habit data.[/yellow]")
    return typer.confirm("Are you sure you want to continue?")


@app.command("import, im", no_args_is_help=True)
def import_(
    ctx: typer.Context,
    path: Path,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="skip confirmation")] = False,
) -> None:
    """Replace all habit data with a backup file from anywhere on disk."""
    app_context = get_app_context(ctx)

    if not __confirm_replace(yes):
        console.print("Operation cancelled.")
        return

    backups = app_context.backups_with(picker=PathFilePicker(path))
    with report_errors("import backup"):
        imported = backups.import_backup()

    if imported:
        console.print(f"Imported backup {path}")


@app.command("restore, r", no_args_is_help=True)
def restore(
    ctx: typer.Context,
    file_name: str,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="skip confirmation")] = False,
) -> None:
    """Replace all habit data with one of the backup files."""
    app_context = get_app_context(ctx)

    if not __confirm_replace(yes):
        console.print("Operation cancelled.")
        return

    with report_errors("restore from backup"):
        app_context.backups.restore_from_file(file_name)

    console.print(f"Restored backup {file_name}")


@app.command("auto, au")
def auto(ctx: typer.Context) -> None:
    """Create an automatic backup if one is due."""
    app_context = get_app_context(ctx)

    with report_errors("run automatic backup"):
        created = app_context.backups.run_auto_backup_if_needed()

    if created:
        console.print("Automatic backup created")
    else:
        console.print("No automatic backup due")


@app.command("auto-config, ac")
def auto_config(
    ctx: typer.Context,
    enable: Annotated[
        Optional[bool], typer.Option("--enable/--disable", help="toggle auto backups")
    ] = None,
    frequency: Annotated[
        Optional[str],
        typer.Option("--frequency", "-f", help="daily, weekly, monthly"),
    ] = None,
    retention: Annotated[
        Optional[int],
        typer.Option("--retention", "-r", help="automatic backups to keep", min=1),
    ] = None,
) -> None:
    """Show or change the automatic backup schedule."""
    app_context = get_app_context(ctx)

    if frequency is not None and frequency not in BACKUP_FREQUENCIES:
        typer.echo(
            f"Invalid frequency: {frequency}. Valid options: {', '.join(BACKUP_FREQUENCIES)}"
        )
        raise typer.Exit(1)

    with report_errors("update auto backup settings"):
        config = app_context.backups.get_auto_backup_config()

        if enable is not None or frequency is not None or retention is not None:
            if config is None:
                config = {
                    "enabled": False,
                    "frequency": "daily",
                    "retention": DEFAULT_RETENTION,
                    "last_backup_date": None,
                }
            updated_config: AutoBackupConfig = config
            if enable is not None:
                updated_config["enabled"] = enable
            if frequency is not None:
                updated_config["frequency"] = frequency  # type: ignore[typeddict-item]
            if retention is not None:
                updated_config["retention"] = retention
            app_context.backups.set_auto_backup_config(updated_config)

    auto_backup_config_view(config)
