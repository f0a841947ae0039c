# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console
from rich.table import Table

from stronghabit.model.stats import WeeklyStats
from stronghabit.view.header import header

WEEKDAY_NAMES = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


def weekly_stats_view(stats: WeeklyStats) -> None:
    header("last 7 days")

    console = Console()
    console.print(
        f" completion rate: [bold]{stats['completion_rate']:.0f}%[/bold]"
        f" ({stats['total_completions']}/{stats['total_possible']})"
    )
    console.print(f" best day: {stats['best_day'] or '-'}")

    stats_table = Table(box=box.SIMPLE)
    stats_table.add_column("day")
    stats_table.add_column("completions", justify="right")
    for day_name in WEEKDAY_NAMES:
        stats_table.add_row(day_name, str(stats["daily_completions"].get(day_name, 0)))

    console.print(stats_table)
