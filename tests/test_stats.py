# SPDX-License-Identifier: MIT

import pendulum

from stronghabit.model.habit import CompletionLog, Habit
from stronghabit.service.stats import calculate_weekly_stats

from conftest import FROZEN_NOW

TODAY = pendulum.date(2024, 3, 10)  # Sunday


def habit(id: str, logs: list[CompletionLog], archived: bool = False) -> Habit:
    return {
        "id": id,
        "name": id,
        "description": None,
        "frequency": "daily",
        "selected_days": [],
        "color": None,
        "created_at": FROZEN_NOW,
        "updated_at": FROZEN_NOW,
        "archived_at": FROZEN_NOW if archived else None,
        "reminder_enabled": False,
        "reminder_time": None,
        "notification_id": None,
        "streak": 0,
        "completion_logs": logs,
    }


def test_no_habits() -> None:
    stats = calculate_weekly_stats([], TODAY)

    assert stats["completion_rate"] == 0.0
    assert stats["total_possible"] == 0
    assert stats["best_day"] == ""


def test_counts_the_last_seven_days_only() -> None:
    habits = [
        habit(
            "read",
            [
                {"date": pendulum.date(2024, 3, 10), "completed": True},
                {"date": pendulum.date(2024, 3, 9), "completed": True},
                {"date": pendulum.date(2024, 3, 8), "completed": False},
                {"date": pendulum.date(2024, 3, 4), "completed": True},
                {"date": pendulum.date(2024, 3, 3), "completed": True},
            ],
        ),
        habit(
            "run",
            [
                {"date": pendulum.date(2024, 3, 9), "completed": True},
            ],
        ),
        habit(
            "archived",
            [{"date": pendulum.date(2024, 3, 10), "completed": True}],
            archived=True,
        ),
    ]

    stats = calculate_weekly_stats(habits, TODAY)

    assert stats["total_possible"] == 5
    assert stats["total_completions"] == 4
    assert stats["completion_rate"] == 80.0
    assert stats["best_day"] == "Saturday"
    assert stats["daily_completions"] == {"Sunday": 1, "Saturday": 2, "Monday": 1}
