# SPDX-License-Identifier: MIT

from typing import Literal, Optional, TypedDict

import pendulum

AchievementType = Literal["streak", "completion", "consistency"]


class Achievement(TypedDict):
    id: str
    title: str
    description: str
    type: AchievementType
    threshold: int
    icon: str


class UnlockedAchievement(Achievement):
    unlocked_at: pendulum.DateTime


class HabitCounters(TypedDict):
    streak: int
    total_completions: int
    longest_run: int
    last_completed: Optional[pendulum.Date]
