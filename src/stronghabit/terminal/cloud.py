# SPDX-License-Identifier: MIT

import typer
from rich.console import Console

from stronghabit.model.backup import CLOUD_PROVIDERS
from stronghabit.terminal.context import get_app_context, report_errors
from stronghabit.terminal.custom_typer import AliasedTyperGroup
from stronghabit.view.backup import cloud_config_view

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

console = Console()


@app.command("connect, cn", no_args_is_help=True)
def connect(
    ctx: typer.Context,
    provider: str = typer.Argument(help=", ".join(CLOUD_PROVIDERS)),
) -> None:
    """Connect a cloud provider, or disconnect with 'none'."""
    app_context = get_app_context(ctx)

    with report_errors("connect cloud provider"):
        config = app_context.cloud.initialize_cloud_provider(provider)

    cloud_config_view(config)


@app.command("sync, s")
def sync(ctx: typer.Context) -> None:
    """Create a backup and upload it to the cloud."""
    app_context = get_app_context(ctx)

    with report_errors("sync to cloud"):
        app_context.cloud.sync_to_cloud()

    console.print("Synced to cloud")


@app.command("upload, up", no_args_is_help=True)
def upload(ctx: typer.Context, file_name: str) -> None:
    """Upload an existing backup file to the cloud."""
    app_context = get_app_context(ctx)

    with report_errors("upload to cloud"):
        app_context.cloud.upload_to_cloud(file_name)

    console.print(f"Uploaded {file_name}")


@app.command("download, dl")
def download(ctx: typer.Context) -> None:
    """Download the latest cloud backup into the backup folder."""
    app_context = get_app_context(ctx)

    with report_errors("download from cloud"):
        file_name = app_context.cloud.download_from_cloud()

    console.print(f"Downloaded {file_name}, restore it with: backup restore {file_name}")


@app.command("status, st")
def status(ctx: typer.Context) -> None:
    """Show the cloud provider and sync schedule."""
    app_context = get_app_context(ctx)

    with report_errors("retrieve cloud settings"):
        config = app_context.cloud.get_cloud_backup_config()

    cloud_config_view(config)
