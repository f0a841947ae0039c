# SPDX-License-Identifier: MIT

import typer

from stronghabit.service.stats import calculate_weekly_stats
from stronghabit.terminal.context import get_app_context, report_errors
from stronghabit.view.stats import weekly_stats_view


def stats(ctx: typer.Context) -> None:
    """Show completion statistics for the last seven days."""
    app_context = get_app_context(ctx)

    with report_errors("calculate statistics"):
        habits = app_context.habits.get_habits()
        today = app_context.settings.today()

    weekly_stats_view(calculate_weekly_stats(habits, today))
