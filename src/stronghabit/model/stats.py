# SPDX-License-Identifier: MIT

from typing import TypedDict


class WeeklyStats(TypedDict):
    completion_rate: float  # Percentage, 0-100
    total_completions: int
    total_possible: int
    best_day: str  # Weekday name, empty when nothing was completed
    daily_completions: dict[str, int]
