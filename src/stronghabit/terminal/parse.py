# SPDX-License-Identifier: MIT

import re
from typing import Optional, cast

import pendulum
import typer

from stronghabit import time
from stronghabit.errors import NotFoundError, ValidationError
from stronghabit.model.entity_id import EntityId
from stronghabit.model.habit import WEEKDAYS, Habit, Weekday


def parse_day(day_param: Optional[str], today: pendulum.Date) -> pendulum.Date:
    """
    Parse a calendar day relative to `today`.

    Accepts YYYY-MM-DD, today/t, yesterday/y or a signed day offset such
    as -1 or 3. None means today.
    """
    if day_param is None:
        return today

    day = day_param.strip().lower()

    if day == "today" or day == "t":
        return today
    if day == "yesterday" or day == "y":
        return today.subtract(days=1)

    # Match numeric input for relative days (e.g., "1", "-1", "365")
    if re.match(r"^[-+]?\d+$", day):
        return today.add(days=int(day))

    if re.match(r"^\d{4}-\d{2}-\d{2}$", day):
        try:
            return time.day_from_str(day)
        except ValueError as e:
            raise typer.BadParameter(f"Invalid date: {e}")

    raise typer.BadParameter(
        f"Day must be YYYY-MM-DD, today, yesterday or an offset, got '{day_param}'"
    )


def parse_weekdays(days_param: Optional[list[str]]) -> Optional[list[Weekday]]:
    """Parse weekday names, accepting any unambiguous prefix such as mon or th."""
    if days_param is None:
        return None

    weekdays: list[Weekday] = []
    for day_param in days_param:
        for part in day_param.split(","):
            part = part.strip().lower()
            if part == "":
                continue
            matches = [weekday for weekday in WEEKDAYS if weekday.startswith(part)]
            if len(matches) != 1:
                raise typer.BadParameter(f"Unknown weekday: {part}")
            weekday = cast(Weekday, matches[0])
            if weekday not in weekdays:
                weekdays.append(weekday)

    # Keep calendar order regardless of input order
    return sorted(weekdays, key=WEEKDAYS.index)


def resolve_habit_id(habits: list[Habit], id_param: str) -> EntityId:
    """Resolve a full habit id or a unique prefix of one."""
    for habit in habits:
        if habit["id"] == id_param:
            return habit["id"]

    matches = [habit["id"] for habit in habits if habit["id"].startswith(id_param)]
    if len(matches) == 0:
        raise NotFoundError(f"Habit not found: {id_param}")
    if len(matches) > 1:
        raise ValidationError(f"Habit id prefix is ambiguous: {id_param}")
    return matches[0]
