# SPDX-License-Identifier: MIT

from typing import Literal, NotRequired, Optional, TypedDict

import pendulum

from stronghabit.model.entity_id import EntityId

Frequency = Literal["daily", "weekly", "monthly"]
Weekday = Literal[
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
]

FREQUENCIES: list[str] = ["daily", "weekly", "monthly"]
WEEKDAYS: list[str] = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]


class CompletionLog(TypedDict):
    date: pendulum.Date  # Calendar day, at most one log per day
    completed: bool


class Habit(TypedDict):
    id: EntityId
    name: str
    description: Optional[str]
    frequency: Frequency
    selected_days: list[Weekday]  # Only meaningful for weekly habits
    color: Optional[str]
    created_at: pendulum.DateTime
    updated_at: pendulum.DateTime
    archived_at: Optional[pendulum.DateTime]
    reminder_enabled: bool
    reminder_time: Optional[str]  # HH:MM
    notification_id: Optional[str]
    streak: int  # Derived from completion_logs
    completion_logs: list[CompletionLog]


class HabitInput(TypedDict):
    name: str
    frequency: str
    description: NotRequired[Optional[str]]
    selected_days: NotRequired[list[Weekday]]
    color: NotRequired[Optional[str]]
    reminder_enabled: NotRequired[bool]
    reminder_time: NotRequired[Optional[str]]


class StorageDocument(TypedDict):
    habits: list[Habit]
    last_updated: pendulum.DateTime
    version: int
