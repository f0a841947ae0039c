# SPDX-License-Identifier: MIT

from typing import Optional

import pendulum


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def datetime_to_iso_str(datetime: pendulum.DateTime) -> str:
    return datetime.isoformat()


def datetime_to_iso_str_optional(
    datetime: Optional[pendulum.DateTime],
) -> Optional[str]:
    if datetime is None:
        return None
    return datetime_to_iso_str(datetime)


def datetime_from_str(datetime: str) -> pendulum.DateTime:
    parsed = pendulum.parse(datetime)
    if not isinstance(parsed, pendulum.DateTime):
        raise ValueError(f"not a timestamp: {datetime}")
    return parsed


def datetime_from_str_optional(datetime: Optional[str]) -> Optional[pendulum.DateTime]:
    if datetime is None:
        return None
    return datetime_from_str(datetime)


def datetime_to_display_local_datetime_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("YYYY-MM-DD ddd HH:mm")


def datetime_to_display_local_datetime_str_optional(
    datetime: Optional[pendulum.DateTime],
) -> Optional[str]:
    if datetime is None:
        return None
    return datetime_to_display_local_datetime_str(datetime)


def datetime_to_file_timestamp(datetime: pendulum.DateTime) -> str:
    """Format a moment as '2024-01-03T10-20-30-123Z' for use in a file name."""
    iso = datetime.in_tz("UTC").format("YYYY-MM-DD[T]HH:mm:ss.SSS[Z]")
    return iso.replace(":", "-").replace(".", "-")


def day_to_str(day: pendulum.Date) -> str:
    return day.format("YYYY-MM-DD")


def day_from_str(day: str) -> pendulum.Date:
    """
    Parse the calendar day of a 'YYYY-MM-DD' string or a full ISO timestamp.

    The day component is taken as written, without converting timezones, so
    '2024-01-01T00:00:00.000Z' and '2024-01-01' are the same day.
    """
    parsed = pendulum.parse(day.strip())
    if isinstance(parsed, pendulum.DateTime):
        return parsed.date()
    if isinstance(parsed, pendulum.Date):
        return parsed
    raise ValueError(f"not a calendar day: {day}")


def today_for_offset(
    now: pendulum.DateTime, offset_minutes: Optional[int]
) -> pendulum.Date:
    """
    The calendar day at `now` for a user offset in minutes east of UTC.

    Without an offset the machine's local timezone is used.
    """
    if offset_minutes is None:
        return now.in_tz("local").date()
    return now.in_tz(pendulum.FixedTimezone(offset_minutes * 60)).date()
