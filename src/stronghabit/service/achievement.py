# SPDX-License-Identifier: MIT

from typing import Optional, TypeVar

import pendulum

from stronghabit import time
from stronghabit.model.achievement import (
    Achievement,
    HabitCounters,
    UnlockedAchievement,
)
from stronghabit.model.habit import Habit
from stronghabit.service.streak import longest_completed_run

ACHIEVEMENTS: list[Achievement] = [
    {
        "id": "streak-3",
        "title": "3 Day Streak",
        "description": "Maintain a habit for 3 days in a row",
        "type": "streak",
        "threshold": 3,
        "icon": "star-outline",
    },
    {
        "id": "streak-7",
        "title": "Week Warrior",
        "description": "Maintain a habit for 7 days in a row",
        "type": "streak",
        "threshold": 7,
        "icon": "star-half",
    },
    {
        "id": "streak-30",
        "title": "Monthly Master",
        "description": "Maintain a habit for 30 days in a row",
        "type": "streak",
        "threshold": 30,
        "icon": "star",
    },
    {
        "id": "streak-60",
        "title": "Habit Hero",
        "description": "Maintain a habit for 60 days in a row",
        "type": "streak",
        "threshold": 60,
        "icon": "medal",
    },
    {
        "id": "streak-90",
        "title": "Quarterly Champion",
        "description": "Maintain a habit for 90 days in a row",
        "type": "streak",
        "threshold": 90,
        "icon": "trophy",
    },
    {
        "id": "streak-365",
        "title": "Yearly Legend",
        "description": "Maintain a habit for a full year",
        "type": "streak",
        "threshold": 365,
        "icon": "crown",
    },
    {
        "id": "completion-10",
        "title": "Getting Started",
        "description": "Complete a habit 10 times",
        "type": "completion",
        "threshold": 10,
        "icon": "check-circle-outline",
    },
    {
        "id": "completion-25",
        "title": "Building Momentum",
        "description": "Complete a habit 25 times",
        "type": "completion",
        "threshold": 25,
        "icon": "check-circle",
    },
    {
        "id": "completion-50",
        "title": "Half Century",
        "description": "Complete a habit 50 times",
        "type": "completion",
        "threshold": 50,
        "icon": "check-decagram-outline",
    },
    {
        "id": "completion-100",
        "title": "Century Club",
        "description": "Complete a habit 100 times",
        "type": "completion",
        "threshold": 100,
        "icon": "check-decagram",
    },
    {
        "id": "consistency-5",
        "title": "Consistency Starter",
        "description": "Complete a habit on 5 consecutive days",
        "type": "consistency",
        "threshold": 5,
        "icon": "clock-outline",
    },
    {
        "id": "consistency-14",
        "title": "Routine Builder",
        "description": "Complete a habit on 14 consecutive days",
        "type": "consistency",
        "threshold": 14,
        "icon": "clock-check-outline",
    },
    {
        "id": "consistency-30",
        "title": "Time Master",
        "description": "Complete a habit on 30 consecutive days",
        "type": "consistency",
        "threshold": 30,
        "icon": "clock-check",
    },
]

ACHIEVEMENT_TYPE_ORDER = {"streak": 1, "completion": 2, "consistency": 3}


def get_habit_counters(habit: Habit) -> HabitCounters:
    completed_days = [log["date"] for log in habit["completion_logs"] if log["completed"]]
    last_completed: Optional[pendulum.Date] = max(completed_days) if completed_days else None
    return {
        "streak": habit["streak"],
        "total_completions": len(completed_days),
        "longest_run": longest_completed_run(habit["completion_logs"]),
        "last_completed": last_completed,
    }


def check_achievements(
    habit: Habit, achievements: list[Achievement] = ACHIEVEMENTS
) -> list[UnlockedAchievement]:
    """Return every achievement whose threshold the habit's counters reach."""
    counters = get_habit_counters(habit)
    now = time.now_utc()

    values = {
        "streak": counters["streak"],
        "completion": counters["total_completions"],
        "consistency": counters["longest_run"],
    }

    unlocked: list[UnlockedAchievement] = []
    for achievement in achievements:
        if values[achievement["type"]] >= achievement["threshold"]:
            unlocked.append({**achievement, "unlocked_at": now})
    return unlocked


T = TypeVar("T", bound=Achievement)


def sort_achievements(achievements: list[T]) -> list[T]:
    return sorted(
        achievements,
        key=lambda achievement: (
            ACHIEVEMENT_TYPE_ORDER[achievement["type"]],
            achievement["threshold"],
        ),
    )
