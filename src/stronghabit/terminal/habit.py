# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console

from stronghabit import time
from stronghabit.model.habit import FREQUENCIES, HabitInput
from stronghabit.repository.habit import parse_reminder_time
from stronghabit.service.achievement import check_achievements, sort_achievements
from stronghabit.terminal.context import get_app_context, report_errors
from stronghabit.terminal.custom_typer import AliasedTyperGroup
from stronghabit.terminal.parse import parse_day, parse_weekdays, resolve_habit_id
from stronghabit.view.habit import achievements_view, habits_view, single_habit_view

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

console = Console()


def validate_reminder(reminder: Optional[str]) -> Optional[str]:
    if reminder is not None and parse_reminder_time(reminder) is None:
        raise typer.BadParameter(
            f"Reminder must be in HH:MM format (e.g., 08:00 or 17:30), got '{reminder}'"
        )
    return reminder


@app.command("add, a", no_args_is_help=True)
def add(
    ctx: typer.Context,
    name: str,
    frequency: Annotated[
        str,
        typer.Option("--frequency", "-f", help="daily, weekly, monthly"),
    ] = "daily",
    days: Annotated[
        Optional[list[str]],
        typer.Option(
            "--day",
            "-d",
            help="weekday for weekly habits, accepts multiple or comma separated",
        ),
    ] = None,
    description: Annotated[
        Optional[str], typer.Option("--description", "-desc")
    ] = None,
    color: Annotated[Optional[str], typer.Option("--color", "-col")] = None,
    reminder: Annotated[
        Optional[str],
        typer.Option(
            "--reminder", "-r", help="daily reminder time HH:MM", callback=validate_reminder
        ),
    ] = None,
) -> None:
    """Create a new habit."""
    app_context = get_app_context(ctx)

    if frequency not in FREQUENCIES:
        typer.echo(
            f"Invalid frequency: {frequency}. Valid options: {', '.join(FREQUENCIES)}"
        )
        raise typer.Exit(1)

    habit_input: HabitInput = {
        "name": name,
        "frequency": frequency,
        "reminder_enabled": reminder is not None,
    }
    selected_days = parse_weekdays(days)
    if selected_days is not None:
        habit_input["selected_days"] = selected_days
    if description is not None:
        habit_input["description"] = description
    if color is not None:
        habit_input["color"] = color
    if reminder is not None:
        habit_input["reminder_time"] = reminder

    with report_errors("add habit"):
        habit = app_context.habits.add_habit(habit_input)

    console.print(f"Added habit [bold]{habit['name']}[/bold] ({habit['id']})")


@app.command("list, ls")
def list_habits(
    ctx: typer.Context,
    archived: Annotated[
        bool, typer.Option("--archived", "-ar", help="include archived habits")
    ] = False,
) -> None:
    """List habits with today's completion state."""
    app_context = get_app_context(ctx)

    with report_errors("retrieve habits"):
        habits = app_context.habits.get_habits()
        today = app_context.settings.today()

    if not archived:
        habits = [habit for habit in habits if habit["archived_at"] is None]

    habits_view(habits, today)


@app.command("show, s", no_args_is_help=True)
def show(ctx: typer.Context, id: str) -> None:
    """Show a habit and its recent completion logs."""
    app_context = get_app_context(ctx)

    with report_errors("show habit"):
        habit_id = resolve_habit_id(app_context.habits.get_habits(), id)
        habit = app_context.habits.get_habit(habit_id)

    single_habit_view(habit)


@app.command("modify, m", no_args_is_help=True)
def modify(
    ctx: typer.Context,
    id: str,
    name: Annotated[Optional[str], typer.Option("--name", "-n")] = None,
    frequency: Annotated[
        Optional[str],
        typer.Option("--frequency", "-f", help="daily, weekly, monthly"),
    ] = None,
    days: Annotated[
        Optional[list[str]],
        typer.Option(
            "--day",
            "-d",
            help="replaces the weekdays, accepts multiple or comma separated",
        ),
    ] = None,
    description: Annotated[
        Optional[str], typer.Option("--description", "-desc")
    ] = None,
    remove_description: Annotated[
        bool, typer.Option("--remove-description", "-rdesc")
    ] = False,
    color: Annotated[Optional[str], typer.Option("--color", "-col")] = None,
    remove_color: Annotated[bool, typer.Option("--remove-color", "-rcol")] = False,
    reminder: Annotated[
        Optional[str],
        typer.Option(
            "--reminder", "-r", help="daily reminder time HH:MM", callback=validate_reminder
        ),
    ] = None,
    remove_reminder: Annotated[
        bool, typer.Option("--remove-reminder", "-rr")
    ] = False,
    archive: Annotated[
        Optional[bool], typer.Option("--archive/--unarchive")
    ] = None,
) -> None:
    """Change properties of a habit."""
    app_context = get_app_context(ctx)

    if frequency is not None and frequency not in FREQUENCIES:
        typer.echo(
            f"Invalid frequency: {frequency}. Valid options: {', '.join(FREQUENCIES)}"
        )
        raise typer.Exit(1)

    with report_errors("modify habit"):
        habit_id = resolve_habit_id(app_context.habits.get_habits(), id)
        habit = app_context.habits.get_habit(habit_id)

        if name is not None:
            habit["name"] = name
        if frequency is not None:
            habit["frequency"] = frequency  # type: ignore[typeddict-item]
        selected_days = parse_weekdays(days)
        if selected_days is not None:
            habit["selected_days"] = selected_days
        if description is not None:
            habit["description"] = description
        if remove_description:
            habit["description"] = None
        if color is not None:
            habit["color"] = color
        if remove_color:
            habit["color"] = None
        if reminder is not None:
            habit["reminder_enabled"] = True
            habit["reminder_time"] = reminder
        if remove_reminder:
            habit["reminder_enabled"] = False
            habit["reminder_time"] = None
        if archive is True and habit["archived_at"] is None:
            habit["archived_at"] = time.now_utc()
        if archive is False:
            habit["archived_at"] = None

        app_context.habits.update_habit(habit)

    single_habit_view(app_context.habits.get_habit(habit_id))


@app.command("delete, del", no_args_is_help=True)
def delete(ctx: typer.Context, id: str) -> None:
    """Delete a habit and all of its completion logs."""
    app_context = get_app_context(ctx)

    with report_errors("delete habit"):
        habit_id = resolve_habit_id(app_context.habits.get_habits(), id)
        app_context.habits.delete_habit(habit_id)

    console.print(f"Deleted habit {habit_id}")


def __set_completion(
    ctx: typer.Context, id: str, day: Optional[str], completed: bool
) -> None:
    app_context = get_app_context(ctx)

    with report_errors("update habit completion"):
        habit_id = resolve_habit_id(app_context.habits.get_habits(), id)
        completion_day = parse_day(day, app_context.settings.today())
        app_context.habits.update_habit_completion(habit_id, completion_day, completed)
        habit = app_context.habits.get_habit(habit_id)

    console.print(
        f"[bold]{habit['name']}[/bold] "
        f"{'completed' if completed else 'not completed'} on "
        f"{time.day_to_str(completion_day)}, streak: {habit['streak']}"
    )


@app.command("done, d", no_args_is_help=True)
def done(
    ctx: typer.Context,
    id: str,
    day: Annotated[
        Optional[str],
        typer.Argument(help="YYYY-MM-DD, today, yesterday or a day offset"),
    ] = None,
) -> None:
    """Mark a habit as completed on a day, today by default."""
    __set_completion(ctx, id, day, True)


@app.command("undo, u", no_args_is_help=True)
def undo(
    ctx: typer.Context,
    id: str,
    day: Annotated[
        Optional[str],
        typer.Argument(help="YYYY-MM-DD, today, yesterday or a day offset"),
    ] = None,
) -> None:
    """Mark a habit as not completed on a day, today by default."""
    __set_completion(ctx, id, day, False)


@app.command("cleanup")
def cleanup(ctx: typer.Context) -> None:
    """Remove habits and completion logs older than a year."""
    app_context = get_app_context(ctx)

    with report_errors("clean up old data"):
        app_context.habits.cleanup_old_data()

    console.print("Removed data older than a year")


@app.command("achievements, ach", no_args_is_help=True)
def achievements(ctx: typer.Context, id: str) -> None:
    """Show the achievements a habit has unlocked."""
    app_context = get_app_context(ctx)

    with report_errors("check achievements"):
        habit_id = resolve_habit_id(app_context.habits.get_habits(), id)
        habit = app_context.habits.get_habit(habit_id)

    achievements_view(habit, sort_achievements(check_achievements(habit)))
