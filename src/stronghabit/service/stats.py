# SPDX-License-Identifier: MIT

import pendulum

from stronghabit.model.habit import Habit
from stronghabit.model.stats import WeeklyStats

WEEK_LENGTH_DAYS = 7


def calculate_weekly_stats(habits: list[Habit], today: pendulum.Date) -> WeeklyStats:
    """
    Summarize completion logs of the seven days ending on `today`.

    Every logged day counts as possible, completed ones as completions.
    Archived habits are left out.
    """
    week_start = today.subtract(days=WEEK_LENGTH_DAYS - 1)

    daily_completions: dict[str, int] = {}
    total_completions = 0
    total_possible = 0

    for habit in habits:
        if habit["archived_at"] is not None:
            continue
        for log in habit["completion_logs"]:
            if not week_start <= log["date"] <= today:
                continue
            total_possible += 1
            if log["completed"]:
                day_name = log["date"].format("dddd")
                daily_completions[day_name] = daily_completions.get(day_name, 0) + 1
                total_completions += 1

    best_day = ""
    if daily_completions:
        best_day = max(daily_completions.items(), key=lambda kvp: kvp[1])[0]

    return {
        "completion_rate": (total_completions / total_possible) * 100
        if total_possible > 0
        else 0.0,
        "total_completions": total_completions,
        "total_possible": total_possible,
        "best_day": best_day,
        "daily_completions": daily_completions,
    }
