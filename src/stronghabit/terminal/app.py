# SPDX-License-Identifier: MIT

from typing import Annotated

import typer

from stronghabit.cleanup import register_cleanup
from stronghabit.initialize import initialize
from stronghabit.terminal import backup, cloud, configuration, habit
from stronghabit.terminal.custom_typer import OrderedTyperGroup
from stronghabit.terminal.stats import stats
from stronghabit.view import state as view_state

app = typer.Typer(
    cls=OrderedTyperGroup,
    help="StrongHabit - Habit tracking in the CLI",
    no_args_is_help=True,
)
app.add_typer(habit.app, name="habit, h")
app.add_typer(backup.app, name="backup, b")
app.add_typer(cloud.app, name="cloud, cl")
app.add_typer(configuration.app, name="config, c")
app.command(name="stats, st")(stats)


@app.callback()
def main_callback(
    ctx: typer.Context,
    no_header: Annotated[
        bool,
        typer.Option(
            "--no-header",
            "-nh",
            help="Suppress header output in reports",
        ),
    ] = False,
) -> None:
    """
    StrongHabit - Habit tracking in the CLI

    Global options that apply to all commands.
    """
    if no_header:
        view_state.set_show_header(False)

    # An application context passed in by the caller is used as is
    if ctx.obj is None:
        ctx.obj = initialize()
        register_cleanup(ctx.obj)


def run() -> None:
    app()
