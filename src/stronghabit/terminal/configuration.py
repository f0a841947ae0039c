# SPDX-License-Identifier: MIT

import re
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from stronghabit import configuration
from stronghabit.terminal.context import get_app_context, report_errors
from stronghabit.terminal.custom_typer import AliasedTyperGroup

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def format_timezone_offset(offset_minutes: Optional[int]) -> str:
    if offset_minutes is None:
        return "local"
    sign = "+" if offset_minutes >= 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"UTC{sign}{hours:02d}:{minutes:02d}"


def parse_timezone_offset(offset: str) -> int:
    """Parse +HH:MM, -HH:MM or a signed number of minutes east of UTC."""
    if re.match(r"^[-+]?\d+$", offset):
        return int(offset)

    offset_match = re.match(r"^([-+])(\d{1,2}):(\d{2})$", offset)
    if not offset_match:
        raise typer.BadParameter(
            f"Offset must be +HH:MM, -HH:MM or minutes, got '{offset}'"
        )
    minutes = int(offset_match.group(2)) * 60 + int(offset_match.group(3))
    return -minutes if offset_match.group(1) == "-" else minutes


@app.command("show, s")
def show(ctx: typer.Context) -> None:
    """Display current configuration settings."""
    app_context = get_app_context(ctx)
    config = app_context.configuration.get_config()

    with report_errors("retrieve settings"):
        offset = app_context.settings.get_timezone_offset()
        notifications_enabled = app_context.settings.get_notifications_enabled()

    console = Console()
    table = Table()
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("data_path", str(configuration.DATA_PATH))
    table.add_row("backup_path", str(configuration.BACKUP_DIR))
    table.add_row("log_level", config["log_level"])
    table.add_row("log_path", str(configuration.LOG_PATH))
    table.add_row(
        "run_auto_backup_on_start",
        "✓ Enabled" if config["run_auto_backup_on_start"] else "✗ Disabled",
    )
    table.add_row(
        "run_cloud_sync_on_start",
        "✓ Enabled" if config.get("run_cloud_sync_on_start", False) else "✗ Disabled",
    )
    table.add_row("cloud_folder", config.get("cloud_folder") or "None")
    table.add_row("timezone", format_timezone_offset(offset))
    table.add_row(
        "notifications", "✓ Enabled" if notifications_enabled else "✗ Disabled"
    )

    console.print(table)


@app.command("timezone, tz")
def timezone(
    ctx: typer.Context,
    offset: Annotated[
        Optional[str],
        typer.Option(
            "--offset", "-o", help="+HH:MM, -HH:MM or minutes east of UTC"
        ),
    ] = None,
    local: Annotated[
        bool, typer.Option("--local", "-l", help="follow the machine's timezone")
    ] = False,
) -> None:
    """Show or set the timezone used to decide what day it is."""
    app_context = get_app_context(ctx)

    with report_errors("update timezone"):
        if local:
            app_context.settings.set_timezone_offset(None)
        elif offset is not None:
            app_context.settings.set_timezone_offset(parse_timezone_offset(offset))
        current_offset = app_context.settings.get_timezone_offset()
        today = app_context.settings.today()

    typer.echo(
        f"timezone: {format_timezone_offset(current_offset)}, today: {today.to_date_string()}"
    )


@app.command("notifications, n")
def notifications(
    ctx: typer.Context,
    enable: Annotated[
        Optional[bool], typer.Option("--enable/--disable", help="toggle reminders")
    ] = None,
) -> None:
    """Show or toggle habit reminder notifications."""
    app_context = get_app_context(ctx)

    with report_errors("update notification setting"):
        if enable is not None:
            app_context.settings.set_notifications_enabled(enable)
        enabled = app_context.settings.get_notifications_enabled()

    typer.echo(f"notifications: {'enabled' if enabled else 'disabled'}")


@app.command("log-level, ll", no_args_is_help=True)
def log_level(
    ctx: typer.Context,
    level: str = typer.Argument(help=", ".join(LOG_LEVELS)),
) -> None:
    """Set the level written to the log file."""
    app_context = get_app_context(ctx)

    level = level.upper()
    if level not in LOG_LEVELS:
        typer.echo(f"Invalid log level: {level}. Valid options: {', '.join(LOG_LEVELS)}")
        raise typer.Exit(1)

    app_context.configuration.update_config(log_level=level)  # type: ignore[arg-type]
    app_context.configuration.flush()
    typer.echo(f"log_level: {level}")


@app.command("startup, su")
def startup(
    ctx: typer.Context,
    auto_backup: Annotated[
        Optional[bool],
        typer.Option("--auto-backup/--no-auto-backup", help="run due auto backups"),
    ] = None,
    cloud_sync: Annotated[
        Optional[bool],
        typer.Option("--cloud-sync/--no-cloud-sync", help="run due cloud syncs"),
    ] = None,
) -> None:
    """Choose which scheduled jobs run when the application starts."""
    app_context = get_app_context(ctx)

    app_context.configuration.update_config(
        run_auto_backup_on_start=auto_backup, run_cloud_sync_on_start=cloud_sync
    )
    app_context.configuration.flush()
    show(ctx)


@app.command("cloud-folder, cf")
def cloud_folder(
    ctx: typer.Context,
    folder: Annotated[Optional[Path], typer.Argument()] = None,
    remove: Annotated[bool, typer.Option("--remove", "-r")] = False,
) -> None:
    """Set the synced folder used as cloud storage, effective on next start."""
    app_context = get_app_context(ctx)

    if folder is not None and not folder.is_dir():
        typer.echo(f"Folder does not exist: {folder}")
        raise typer.Exit(1)

    app_context.configuration.update_config(
        cloud_folder=str(folder.resolve()) if folder is not None else None,
        remove_cloud_folder=remove,
    )
    app_context.configuration.flush()
    typer.echo(f"cloud_folder: {app_context.configuration.get_config().get('cloud_folder')}")
