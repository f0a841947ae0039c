# SPDX-License-Identifier: MIT

import pendulum
from rich import box
from rich.console import Console
from rich.table import Table

from stronghabit import time
from stronghabit.model.achievement import UnlockedAchievement
from stronghabit.model.habit import Habit
from stronghabit.service.achievement import get_habit_counters
from stronghabit.service.streak import sort_logs_descending
from stronghabit.view.header import header

SHORT_ID_LENGTH = 8


def short_id(habit: Habit) -> str:
    return habit["id"][:SHORT_ID_LENGTH]


def completion_state(habit: Habit, day: pendulum.Date) -> str:
    for log in habit["completion_logs"]:
        if log["date"] == day:
            return "X" if log["completed"] else "~"
    return " "


def __colored(habit: Habit, value: str) -> str:
    if habit["color"] is None or habit["color"] == "":
        return value
    return f"[{habit['color']}]{value}[/{habit['color']}]"


def habits_view(habits: list[Habit], today: pendulum.Date) -> None:
    """Display habits with today's state and current streak."""
    header("habits")

    habits_table = Table(box=box.SIMPLE)
    habits_table.add_column("id")
    habits_table.add_column("today")
    habits_table.add_column("name")
    habits_table.add_column("frequency")
    habits_table.add_column("days")
    habits_table.add_column("streak", justify="right")
    habits_table.add_column("reminder")

    for habit in habits:
        row = [
            short_id(habit),
            completion_state(habit, today),
            habit["name"],
            habit["frequency"],
            ", ".join(day[:3] for day in habit["selected_days"]),
            str(habit["streak"]),
            habit["reminder_time"] or "" if habit["reminder_enabled"] else "",
        ]
        habits_table.add_row(*[__colored(habit, value) for value in row])

    console = Console()
    console.print(habits_table)


def single_habit_view(habit: Habit, recent_days: int = 14) -> None:
    """Display all properties of a habit followed by its most recent logs."""
    header("habit")

    counters = get_habit_counters(habit)

    habit_table = Table(box=box.SIMPLE)
    habit_table.add_column("property")
    habit_table.add_column("value")

    habit_table.add_row("id", habit["id"])
    habit_table.add_row("name", __colored(habit, habit["name"]))
    habit_table.add_row("description", habit["description"] or "")
    habit_table.add_row("frequency", habit["frequency"])
    habit_table.add_row("days", ", ".join(habit["selected_days"]))
    habit_table.add_row("color", habit["color"] or "")
    habit_table.add_row(
        "reminder", habit["reminder_time"] or "" if habit["reminder_enabled"] else "off"
    )
    habit_table.add_row("streak", str(habit["streak"]))
    habit_table.add_row("completions", str(counters["total_completions"]))
    habit_table.add_row("longest run", str(counters["longest_run"]))
    habit_table.add_row(
        "created", time.datetime_to_display_local_datetime_str(habit["created_at"])
    )
    habit_table.add_row(
        "updated", time.datetime_to_display_local_datetime_str(habit["updated_at"])
    )
    habit_table.add_row(
        "archived",
        time.datetime_to_display_local_datetime_str_optional(habit["archived_at"])
        or "",
    )

    console = Console()
    console.print(habit_table)

    logs_table = Table(box=box.SIMPLE)
    logs_table.add_column("date")
    logs_table.add_column("completed")
    for log in sort_logs_descending(habit["completion_logs"])[:recent_days]:
        logs_table.add_row(
            log["date"].format("YYYY-MM-DD ddd"), "X" if log["completed"] else "~"
        )
    console.print(logs_table)


def achievements_view(habit: Habit, achievements: list[UnlockedAchievement]) -> None:
    header(f"achievements: {habit['name']}")

    if len(achievements) == 0:
        Console().print(" No achievements unlocked yet")
        return

    achievements_table = Table(box=box.SIMPLE)
    achievements_table.add_column("type")
    achievements_table.add_column("title")
    achievements_table.add_column("description")

    for achievement in achievements:
        achievements_table.add_row(
            achievement["type"], achievement["title"], achievement["description"]
        )

    console = Console()
    console.print(achievements_table)
